"""Kennzahlen für das Portal (Fortschritt, CO2, Empfehlungsbonus)"""
from typing import Iterable, Optional

from portal.models.portal_db import Milestone, MilestoneStatus, Referral, ReferralStatus

# kg CO2 je kWh Solarstrom (deutscher Strommix)
CO2_KG_PER_KWH = 0.474
# kg CO2, die ein Baum pro Jahr bindet
CO2_KG_PER_TREE_YEAR = 21

BONUS_STATUSES = (ReferralStatus.CONVERTED.value, ReferralStatus.BONUS_PAID.value)


def progress_pct(milestones: Iterable[Milestone]) -> int:
    milestones = list(milestones)
    done = sum(1 for m in milestones if m.status == MilestoneStatus.DONE.value)
    return round(done / max(len(milestones), 1) * 100)


def active_milestone(milestones: Iterable[Milestone]) -> Optional[Milestone]:
    """Erster aktiver Milestone (es sollte genau einen geben)"""
    return next((m for m in milestones if m.status == MilestoneStatus.ACTIVE.value), None)


def co2_saved_kg(production_kwh: float) -> float:
    return round(production_kwh * CO2_KG_PER_KWH, 1)


def trees_equivalent(co2_kg: float) -> int:
    return round(co2_kg / CO2_KG_PER_TREE_YEAR)


def referral_bonus_total(referrals: Iterable[Referral]) -> float:
    """Bonus zählt ab erfolgreicher Installation (converted) bzw. Auszahlung"""
    return sum(r.bonus_amount or 0 for r in referrals if r.status in BONUS_STATUSES)

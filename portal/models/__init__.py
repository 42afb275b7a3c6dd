from portal.models.portal_db import (
    Customer,
    Project,
    Milestone,
    Document,
    MonitoringMonthly,
    Referral,
    NpsResponse,
    PortalNotification,
    ProjectStatus,
    MilestoneStatus,
    DocumentCategory,
    ReferralStatus,
    NotificationType,
)
from portal.models.notification_db import WhatsAppNotification, DeliveryStatus
from portal.models.review_db import CachedReview
from portal.models.notification import (
    WhatsAppSendRequest,
    WhatsAppSendResponse,
    ReminderSweepResponse,
)
from portal.models.review import ReviewSource, ReviewItem, ReviewListResponse

__all__ = [
    "Customer",
    "Project",
    "Milestone",
    "Document",
    "MonitoringMonthly",
    "Referral",
    "NpsResponse",
    "PortalNotification",
    "ProjectStatus",
    "MilestoneStatus",
    "DocumentCategory",
    "ReferralStatus",
    "NotificationType",
    "WhatsAppNotification",
    "DeliveryStatus",
    "CachedReview",
    "WhatsAppSendRequest",
    "WhatsAppSendResponse",
    "ReminderSweepResponse",
    "ReviewSource",
    "ReviewItem",
    "ReviewListResponse",
]

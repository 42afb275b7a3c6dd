"""
Test configuration and fixtures.

In-memory SQLite mit StaticPool, get_db wird im TestClient überschrieben.
Externe Dienste (Twilio, Trustpilot, Supabase) werden über
httpx.MockTransport oder AsyncMock ersetzt.
"""
import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from portal.database import Base, get_db
import portal.models  # noqa: F401  (registriert alle Tabellen)
from portal.models.portal_db import Customer, Project

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Frische DB pro Test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """TestClient mit überschriebener DB-Session"""
    from fastapi.testclient import TestClient
    from portal.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_customer(db_session):
    """Kunden anlegen"""
    def _make(
        first_name="Thomas",
        last_name="Berger",
        phone="05251123456",
        user_id=None,
        **kwargs,
    ) -> Customer:
        suffix = uuid.uuid4().hex[:8]
        customer = Customer(
            user_id=user_id,
            customer_number=kwargs.pop("customer_number", f"K-{suffix}"),
            first_name=first_name,
            last_name=last_name,
            email=kwargs.pop("email", f"{suffix}@example.de"),
            phone=phone,
            referral_code=kwargs.pop("referral_code", f"REF{suffix}".upper()),
            **kwargs,
        )
        db_session.add(customer)
        db_session.commit()
        db_session.refresh(customer)
        return customer

    return _make


@pytest.fixture
def make_project(db_session):
    """Projekt für einen Kunden anlegen"""
    def _make(customer: Customer, **kwargs) -> Project:
        project = Project(
            customer_id=customer.id,
            project_number=kwargs.pop("project_number", f"PRJ-{uuid.uuid4().hex[:8]}"),
            **kwargs,
        )
        db_session.add(project)
        db_session.commit()
        db_session.refresh(project)
        return project

    return _make

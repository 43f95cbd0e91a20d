"""
Pytest configuration and shared fixtures.

Database tests run against an in-memory SQLite database shared through a
StaticPool so every session sees the same data.
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.models import Client, Match, Project, ProjectStatus, Service, Vendor, VendorCountry
from app.services.email_notifier import NotificationError


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeNotifier:
    """Records sends instead of talking to SMTP."""

    def __init__(self):
        self.match_notifications = []
        self.reports = []
        self.fail_for_vendors = set()
        self.fail_reports = False

    def send_match_notification(self, to_address, project_id, vendor_id, score):
        if vendor_id in self.fail_for_vendors:
            raise NotificationError(f"SMTP rejected message for vendor {vendor_id}")
        self.match_notifications.append({
            "to": to_address,
            "project_id": project_id,
            "vendor_id": vendor_id,
            "score": score,
        })
        return f"<match-{project_id}-{vendor_id}@test>"

    def send_report(self, to_address, subject, html_body):
        if self.fail_reports:
            raise NotificationError("SMTP unavailable")
        self.reports.append({"to": to_address, "subject": subject, "html": html_body})
        return f"<report-{len(self.reports)}@test>"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 10, 19, 6, 0, 0))


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_service(db):
    def _make(name):
        service = db.query(Service).filter(Service.name == name).first()
        if service is None:
            service = Service(name=name)
            db.add(service)
            db.commit()
        return service
    return _make


@pytest.fixture
def make_vendor(db, make_service):
    def _make(name, rating="4.00", sla_hours=48, services=(), countries=("US",)):
        vendor = Vendor(name=name, rating=Decimal(rating), response_sla_hours=sla_hours)
        vendor.services = [make_service(s) for s in services]
        vendor.countries = [VendorCountry(country=c) for c in countries]
        db.add(vendor)
        db.commit()
        return vendor
    return _make


@pytest.fixture
def make_client(db):
    def _make(company_name="Example Corp", contact_email="contact@example.com"):
        client = Client(company_name=company_name, contact_email=contact_email)
        db.add(client)
        db.commit()
        return client
    return _make


@pytest.fixture
def make_project(db, make_service):
    def _make(client_id, country="US", services=(), status=ProjectStatus.ACTIVE, budget="100000.00"):
        project = Project(client_id=client_id, country=country, budget=Decimal(budget), status=status)
        project.required_services = [make_service(s) for s in services]
        db.add(project)
        db.commit()
        return project
    return _make


@pytest.fixture
def make_match(db):
    def _make(project_id, vendor_id, score="5.00", created_at=None):
        created_at = created_at or datetime(2026, 10, 19, 6, 0, 0)
        match = Match(
            project_id=project_id,
            vendor_id=vendor_id,
            score=Decimal(score),
            created_at=created_at,
            updated_at=created_at,
        )
        db.add(match)
        db.commit()
        return match
    return _make

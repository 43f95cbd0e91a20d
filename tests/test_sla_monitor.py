"""Tests for SLA expiration checks."""

from datetime import datetime, timedelta
from types import SimpleNamespace

from app.services.match_repository import MatchRepository
from app.services.sla_monitor import SlaMonitor, evaluate_sla

CREATED = datetime(2026, 10, 18, 6, 0, 0)


def _vendor(sla_hours):
    return SimpleNamespace(id=1, name="Vendor", response_sla_hours=sla_hours)


def _match(created_at=CREATED):
    return SimpleNamespace(id=10, project_id=5, created_at=created_at)


class TestEvaluateSla:
    """Tests for evaluate_sla boundaries."""

    def test_one_hour_overdue(self):
        breach = evaluate_sla(_vendor(24), _match(), CREATED + timedelta(hours=25))

        assert breach is not None
        assert breach.hours_overdue == 1
        assert breach.deadline == CREATED + timedelta(hours=24)

    def test_exactly_at_deadline_is_compliant(self):
        assert evaluate_sla(_vendor(24), _match(), CREATED + timedelta(hours=24)) is None

    def test_partial_hours_round_down(self):
        breach = evaluate_sla(_vendor(24), _match(), CREATED + timedelta(hours=24, minutes=59))

        assert breach.hours_overdue == 0

    def test_to_dict(self):
        breach = evaluate_sla(_vendor(2), _match(), CREATED + timedelta(hours=5))

        assert breach.to_dict() == {
            "vendor_id": 1,
            "vendor_name": "Vendor",
            "sla_hours": 2,
            "match_id": 10,
            "project_id": 5,
            "match_created_at": "2026-10-18T06:00:00",
            "deadline": "2026-10-18T08:00:00",
            "hours_overdue": 3,
        }


class TestSlaMonitor:
    """Tests for SlaMonitor.find_expired against SQLite."""

    def test_judged_by_most_recent_match(self, db, make_client, make_project, make_vendor, make_match):
        client = make_client()
        old_project = make_project(client.id)
        new_project = make_project(client.id)
        vendor = make_vendor("Slow", sla_hours=24)
        make_match(old_project.id, vendor.id, created_at=CREATED - timedelta(days=10))
        make_match(new_project.id, vendor.id, created_at=CREATED)

        monitor = SlaMonitor(MatchRepository(db))

        assert monitor.find_expired(CREATED + timedelta(hours=24)) == []

        breaches = monitor.find_expired(CREATED + timedelta(hours=25))
        assert len(breaches) == 1
        assert breaches[0].vendor.id == vendor.id
        assert breaches[0].most_recent_match.project_id == new_project.id
        assert breaches[0].hours_overdue == 1

    def test_vendors_without_matches_ignored(self, db, make_vendor):
        make_vendor("Idle", sla_hours=1)

        assert SlaMonitor(MatchRepository(db)).find_expired(CREATED + timedelta(days=30)) == []

    def test_mixed_vendors(self, db, make_client, make_project, make_vendor, make_match):
        client = make_client()
        project = make_project(client.id)
        fast = make_vendor("Fast", sla_hours=12)
        slow = make_vendor("Slow", sla_hours=72)
        make_match(project.id, fast.id, created_at=CREATED)
        make_match(project.id, slow.id, created_at=CREATED)

        breaches = SlaMonitor(MatchRepository(db)).find_expired(CREATED + timedelta(hours=20))

        assert [b.vendor.id for b in breaches] == [fast.id]
        assert breaches[0].hours_overdue == 8

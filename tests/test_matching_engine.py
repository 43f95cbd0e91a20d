"""Tests for MatchingEngine.rebuild_matches."""

from decimal import Decimal

import pytest

from app.models import Match
from app.services.matching_engine import (
    ClientNotFoundError,
    MatchingEngine,
    NotFoundError,
    ProjectNotFoundError,
)


@pytest.fixture
def us_project(make_client, make_project):
    client = make_client(contact_email="ops@example.com")
    return make_project(client.id, country="US", services=["Legal", "Accounting"])


def _snapshot(matches):
    return {m.vendor_id: m.to_dict() for m in matches}


class TestRebuildMatches:
    """Tests for rebuild behavior and notifications."""

    def test_creates_matches_and_notifies(self, db, notifier, clock, us_project, make_vendor):
        legal = make_vendor("Legal", rating="4.50", sla_hours=12, services=["Legal"])
        both = make_vendor("Both", rating="3.00", sla_hours=48, services=["Legal", "Accounting"])

        matches = MatchingEngine(db, notifier, clock=clock).rebuild_matches(us_project.id)

        assert [m.vendor_id for m in matches] == [legal.id, both.id]
        assert matches[0].score == Decimal("8.50")
        assert matches[1].score == Decimal("8.00")
        assert [n["vendor_id"] for n in notifier.match_notifications] == [legal.id, both.id]
        assert all(n["to"] == "ops@example.com" for n in notifier.match_notifications)

    def test_second_rebuild_is_idempotent(self, db, notifier, clock, us_project, make_vendor):
        make_vendor("Legal", services=["Legal"])
        make_vendor("Both", services=["Legal", "Accounting"])
        engine = MatchingEngine(db, notifier, clock=clock)

        first = _snapshot(engine.rebuild_matches(us_project.id))
        clock.advance(hours=2)
        second = _snapshot(engine.rebuild_matches(us_project.id))

        assert first.keys() == second.keys()
        for vendor_id, before in first.items():
            after = second[vendor_id]
            assert after["id"] == before["id"]
            assert after["score"] == before["score"]
            assert after["created_at"] == before["created_at"]
            assert after["updated_at"] > before["updated_at"]
        assert len(notifier.match_notifications) == 2

    def test_pair_stays_unique_across_rebuilds(self, db, notifier, clock, us_project, make_vendor):
        vendor = make_vendor("Legal", services=["Legal"])
        engine = MatchingEngine(db, notifier, clock=clock)

        for _ in range(3):
            engine.rebuild_matches(us_project.id)
            clock.advance(minutes=5)

        count = db.query(Match).filter(
            Match.project_id == us_project.id,
            Match.vendor_id == vendor.id
        ).count()
        assert count == 1

    def test_score_updated_when_vendor_changes(self, db, notifier, clock, us_project, make_vendor):
        vendor = make_vendor("Legal", rating="4.00", sla_hours=48, services=["Legal"])
        engine = MatchingEngine(db, notifier, clock=clock)
        engine.rebuild_matches(us_project.id)

        vendor.rating = Decimal("2.00")
        db.commit()
        matches = engine.rebuild_matches(us_project.id)

        assert matches[0].score == Decimal("5.00")
        assert len(notifier.match_notifications) == 1

    def test_failed_notification_does_not_block_others(self, db, notifier, clock, us_project, make_vendor):
        first = make_vendor("First", services=["Legal"])
        second = make_vendor("Second", services=["Legal"])
        third = make_vendor("Third", services=["Legal"])
        notifier.fail_for_vendors.add(second.id)

        matches = MatchingEngine(db, notifier, clock=clock).rebuild_matches(us_project.id)

        assert len(matches) == 3
        assert [n["vendor_id"] for n in notifier.match_notifications] == [first.id, third.id]

    def test_failed_notification_is_not_retried(self, db, notifier, clock, us_project, make_vendor):
        vendor = make_vendor("Legal", services=["Legal"])
        notifier.fail_for_vendors.add(vendor.id)
        engine = MatchingEngine(db, notifier, clock=clock)
        engine.rebuild_matches(us_project.id)

        notifier.fail_for_vendors.clear()
        engine.rebuild_matches(us_project.id)

        assert notifier.match_notifications == []

    def test_stale_match_is_kept(self, db, notifier, clock, us_project, make_vendor, make_match):
        stale_vendor = make_vendor("Moved Away", services=["Legal"], countries=["DE"])
        make_match(us_project.id, stale_vendor.id, score="9.00")
        fresh = make_vendor("Legal", services=["Legal"])

        matches = MatchingEngine(db, notifier, clock=clock).rebuild_matches(us_project.id)

        assert {m.vendor_id for m in matches} == {stale_vendor.id, fresh.id}
        stale = [m for m in matches if m.vendor_id == stale_vendor.id][0]
        assert stale.score == Decimal("9.00")

    def test_no_candidates(self, db, notifier, clock, us_project):
        assert MatchingEngine(db, notifier, clock=clock).rebuild_matches(us_project.id) == []
        assert notifier.match_notifications == []


class TestRebuildErrors:
    """Tests for missing project and client."""

    def test_missing_project(self, db, notifier):
        with pytest.raises(ProjectNotFoundError) as exc_info:
            MatchingEngine(db, notifier).rebuild_matches(9999)

        assert exc_info.value.project_id == 9999
        assert isinstance(exc_info.value, NotFoundError)

    def test_missing_client(self, db, notifier, make_project):
        project = make_project(client_id=4242, services=["Legal"])

        with pytest.raises(ClientNotFoundError) as exc_info:
            MatchingEngine(db, notifier).rebuild_matches(project.id)

        assert exc_info.value.client_id == 4242
        assert db.query(Match).count() == 0

"""Tests for the vendor scoring query."""

from decimal import Decimal

import pytest

from app.services.scoring import ScoringQuery, calculate_score, sla_bonus


class TestSlaBonus:
    """Tests for sla_bonus tiers."""

    @pytest.mark.parametrize("hours,expected", [
        (1, 2),
        (24, 2),
        (25, 1),
        (72, 1),
        (73, 0),
        (240, 0),
    ])
    def test_tiers(self, hours, expected):
        assert sla_bonus(hours) == expected


class TestCalculateScore:
    """Tests for calculate_score."""

    def test_two_services_fast_vendor(self):
        """2 overlapping services, rating 4.2, 24h SLA -> 2*2 + 4.2 + 2"""
        assert calculate_score(2, Decimal("4.2"), 24) == Decimal("10.2")

    def test_slow_vendor_gets_no_bonus(self):
        assert calculate_score(1, Decimal("3.50"), 96) == Decimal("5.50")

    def test_float_rating_is_exact(self):
        """Float ratings are converted via str, not binary float"""
        assert calculate_score(3, 4.1, 48) == Decimal("11.1")


class TestScoringQuery:
    """Tests for ScoringQuery.compute_candidates against SQLite."""

    def test_score_formula_end_to_end(self, db, make_client, make_project, make_vendor):
        client = make_client()
        project = make_project(client.id, country="US", services=["Legal", "Accounting", "HR"])
        vendor = make_vendor("Fast Legal", rating="4.2", sla_hours=24,
                             services=["Legal", "Accounting"], countries=["US"])

        candidates = ScoringQuery(db).compute_candidates(project)

        assert len(candidates) == 1
        candidate = candidates[0]
        assert candidate.vendor_id == vendor.id
        assert candidate.overlap_count == 2
        assert candidate.sla_hours == 24
        assert candidate.score == Decimal("10.2")

    def test_vendor_without_overlap_excluded(self, db, make_client, make_project, make_vendor):
        """Project requires {Legal}, vendor offers {IT} -> vendor absent"""
        client = make_client()
        project = make_project(client.id, services=["Legal"])
        make_vendor("IT Only", services=["IT"], countries=["US"])

        assert ScoringQuery(db).compute_candidates(project) == []

    def test_vendor_outside_country_excluded(self, db, make_client, make_project, make_vendor):
        client = make_client()
        project = make_project(client.id, country="US", services=["Legal"])
        make_vendor("German Legal", services=["Legal"], countries=["DE"])

        assert ScoringQuery(db).compute_candidates(project) == []

    def test_multi_country_coverage_does_not_inflate_overlap(self, db, make_client, make_project, make_vendor):
        client = make_client()
        project = make_project(client.id, country="UK", services=["Legal", "HR"])
        make_vendor("Everywhere", rating="4.00", sla_hours=100,
                    services=["Legal", "HR", "IT"], countries=["US", "UK", "DE"])

        candidates = ScoringQuery(db).compute_candidates(project)

        assert len(candidates) == 1
        assert candidates[0].overlap_count == 2
        assert candidates[0].score == Decimal("8.00")

    def test_lowercase_project_country_matches(self, db, make_client, make_project, make_vendor):
        client = make_client()
        project = make_project(client.id, country="us", services=["Legal"])
        make_vendor("Legal US", services=["Legal"], countries=["US"])

        assert len(ScoringQuery(db).compute_candidates(project)) == 1

    def test_deterministic_vendor_order(self, db, make_client, make_project, make_vendor):
        client = make_client()
        project = make_project(client.id, services=["Legal", "IT"])
        first = make_vendor("A", services=["IT"])
        second = make_vendor("B", services=["Legal"])
        third = make_vendor("C", services=["Legal", "IT"])

        query = ScoringQuery(db)
        run_one = [c.vendor_id for c in query.compute_candidates(project)]
        run_two = [c.vendor_id for c in query.compute_candidates(project)]

        assert run_one == run_two == [first.id, second.id, third.id]

    def test_project_without_required_services(self, db, make_client, make_project, make_vendor):
        client = make_client()
        project = make_project(client.id, services=[])
        make_vendor("Legal US", services=["Legal"])

        assert ScoringQuery(db).compute_candidates(project) == []

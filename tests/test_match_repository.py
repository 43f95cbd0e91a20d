"""Tests for MatchRepository."""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from app.services.match_repository import MatchRepository


class TestUpsert:
    """Tests for MatchRepository.upsert against SQLite."""

    def test_insert_then_update(self, db, clock, make_client, make_project, make_vendor):
        client = make_client()
        project = make_project(client.id)
        vendor = make_vendor("Vendor")
        repository = MatchRepository(db, clock=clock)

        first = repository.upsert(project.id, vendor.id, Decimal("6.00"))
        first_id = first.match.id
        created_at = first.match.created_at
        clock.advance(hours=1)
        second = repository.upsert(project.id, vendor.id, Decimal("7.50"))

        assert first.is_new is True
        assert second.is_new is False
        assert second.match.id == first_id
        assert second.match.score == Decimal("7.50")
        assert second.match.created_at == created_at
        assert second.match.updated_at == clock()

    def test_unsupported_dialect_raises_value_error(self, clock):
        db = Mock()
        db.query.return_value.filter.return_value.first.return_value = None
        db.get_bind.return_value.dialect.name = "mysql"

        with pytest.raises(ValueError, match="mysql"):
            MatchRepository(db, clock=clock).upsert(1, 2, Decimal("5.00"))

        db.execute.assert_not_called()
        db.commit.assert_not_called()

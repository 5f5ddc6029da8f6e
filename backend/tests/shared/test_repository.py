"""Tests for shared/repository.py."""

from types import SimpleNamespace
from typing import Optional
from unittest.mock import MagicMock

from shared.repository import BaseRepository


class TestBaseRepository:
    def test_init_stores_db_client(self):
        mock_db = MagicMock()
        repo = BaseRepository(mock_db)
        assert repo._db is mock_db

    def test_first_returns_first_row(self):
        result = SimpleNamespace(data=[{"id": "1"}, {"id": "2"}])
        assert BaseRepository._first(result) == {"id": "1"}

    def test_first_handles_empty_and_missing_results(self):
        assert BaseRepository._first(SimpleNamespace(data=[])) is None
        assert BaseRepository._first(SimpleNamespace(data=None)) is None
        assert BaseRepository._first(None) is None

    def test_subclass_query_chain(self):
        """Subclass lookups chain the query builder and map the first row."""
        mock_db = MagicMock()
        chain = mock_db.table.return_value.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value.data = [{"id": "123", "code": "VIP"}]

        class CodeRepository(BaseRepository[dict]):
            def get_by_code(self, code: str) -> Optional[dict]:
                result = self._db.table("invite_links").select("*").eq("code", code).limit(1).execute()
                return self._first(result)

        assert CodeRepository(mock_db).get_by_code("VIP") == {"id": "123", "code": "VIP"}
        mock_db.table.assert_called_once_with("invite_links")

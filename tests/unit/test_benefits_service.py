"""Unit tests for benefits source selection and filtering."""
import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from benefits import repository, service
from core.errors import AuthError, FetchError, SourceUnavailable

SHEET_ROWS = [
    {'id': '1', 'name': 'Dental plan', 'category': 'Health', 'bank': 'Acme'},
    {'id': '2', 'name': 'Eye exam', 'category': 'health', 'bank': 'Globex'},
    {'id': '3', 'name': 'Gym discount', 'category': 'Wellness', 'bank': 'Acme'},
    {'id': '4', 'name': 'Uncategorized', 'category': '', 'bank': ''},
]


def _resolve(database, **kwargs):
    return asyncio.run(service.resolve_benefits(database, **kwargs))


@pytest.mark.unit
class TestBuildListQuery:
    """Tests for the benefits SQL."""

    def test_no_filters(self):
        assert repository.build_list_query() == ('SELECT * FROM benefits ORDER BY id', [])

    def test_category_is_bound(self):
        sql, args = repository.build_list_query(category="Health'; DROP TABLE benefits; --")
        assert sql == 'SELECT * FROM benefits WHERE category = $1 ORDER BY id'
        assert args == ["Health'; DROP TABLE benefits; --"]

    def test_all_filters(self):
        sql, args = repository.build_list_query(category='Health', bank='Acme', limit=5)
        assert sql == 'SELECT * FROM benefits WHERE category = $1 AND bank = $2 ORDER BY id LIMIT $3'
        assert args == ['Health', 'Acme', 5]

    def test_bank_only(self):
        sql, args = repository.build_list_query(bank='Acme')
        assert sql == 'SELECT * FROM benefits WHERE bank = $1 ORDER BY id'
        assert args == ['Acme']


@pytest.mark.unit
class TestSheetPath:
    """Tests for the spreadsheet-first path."""

    def test_returns_sheet_rows(self, sheet_env, fake_db):
        with patch('benefits.sheets.fetch_benefits_from_sheet', new=AsyncMock(return_value=list(SHEET_ROWS))):
            result = _resolve(fake_db)
        assert result == SHEET_ROWS
        assert fake_db.queries == []

    def test_category_filter_is_case_insensitive(self, sheet_env, fake_db):
        with patch('benefits.sheets.fetch_benefits_from_sheet', new=AsyncMock(return_value=list(SHEET_ROWS))):
            result = _resolve(fake_db, category='HEALTH')
        assert [r['id'] for r in result] == ['1', '2']
        assert all(r['category'].lower() == 'health' for r in result)

    def test_category_filter_is_exact_not_substring(self, sheet_env, fake_db):
        with patch('benefits.sheets.fetch_benefits_from_sheet', new=AsyncMock(return_value=list(SHEET_ROWS))):
            assert _resolve(fake_db, category='heal') == []

    def test_bank_filter_and_limit(self, sheet_env, fake_db):
        with patch('benefits.sheets.fetch_benefits_from_sheet', new=AsyncMock(return_value=list(SHEET_ROWS))):
            result = _resolve(fake_db, bank='acme', limit=1)
        assert [r['id'] for r in result] == ['1']

    def test_blank_category_means_no_filter(self, sheet_env, fake_db):
        with patch('benefits.sheets.fetch_benefits_from_sheet', new=AsyncMock(return_value=list(SHEET_ROWS))):
            assert len(_resolve(fake_db, category='  ')) == len(SHEET_ROWS)


@pytest.mark.unit
class TestDatabaseFallback:
    """Tests for falling back to the database."""

    @pytest.mark.parametrize('error', [FetchError('403'), AuthError('denied'), ValueError('bad csv')])
    def test_sheet_failure_falls_back_to_database(self, sheet_env, fake_db, db_rows, error):
        with patch('benefits.sheets.fetch_benefits_from_sheet', new=AsyncMock(side_effect=error)):
            result = _resolve(fake_db)
        assert result == db_rows
        assert fake_db.queries == [('SELECT * FROM benefits ORDER BY id', ())]

    def test_no_sheet_configured_uses_database(self, fake_db, db_rows):
        with patch('benefits.sheets.fetch_benefits_from_sheet', new=AsyncMock()) as fetch:
            result = _resolve(fake_db)
        fetch.assert_not_awaited()
        assert result == db_rows

    def test_database_filter_is_exact_sql_match(self, fake_db):
        """The database path passes the category through unchanged; Postgres matches it exactly."""
        _resolve(fake_db, category='HEALTH')
        assert fake_db.queries == [('SELECT * FROM benefits WHERE category = $1 ORDER BY id', ('HEALTH',))]

    def test_padded_category_is_passed_through_unchanged(self, fake_db):
        """Surrounding spaces are part of the exact-match value on the database path."""
        _resolve(fake_db, category=' Health ')
        assert fake_db.queries == [('SELECT * FROM benefits WHERE category = $1 ORDER BY id', (' Health ',))]

    def test_padded_bank_is_passed_through_unchanged(self, fake_db):
        _resolve(fake_db, bank='Acme ')
        assert fake_db.queries == [('SELECT * FROM benefits WHERE bank = $1 ORDER BY id', ('Acme ',))]

    def test_database_rows_are_not_filtered_again(self, make_db):
        rows = [{'id': 1, 'name': 'Mismatch', 'category': 'Other'}]
        database = make_db(rows=rows)
        assert _resolve(database, category='Health') == rows

    def test_both_sources_down(self, sheet_env, make_db):
        database = make_db(reachable=False)
        with patch('benefits.sheets.fetch_benefits_from_sheet', new=AsyncMock(side_effect=FetchError('down'))):
            with pytest.raises(SourceUnavailable):
                _resolve(database)
        assert database.queries == []

    def test_database_unreachable_without_sheet(self, make_db):
        with pytest.raises(SourceUnavailable):
            _resolve(make_db(reachable=False))

    def test_query_failure_is_source_unavailable(self, make_db):
        database = make_db(query_error=RuntimeError('relation does not exist'))
        with pytest.raises(SourceUnavailable) as exc_info:
            _resolve(database)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

"""Unit tests for the Alembic revisions"""

import importlib.util
from pathlib import Path

import pytest

from collection_service.core.values import FilterKind, SortDirection, ValueType, code_table

VERSIONS = Path(__file__).resolve().parents[2] / "alembic" / "versions"


def _load_revision(filename):
    spec = importlib.util.spec_from_file_location(filename[:-3], VERSIONS / filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.mark.unit
class TestInitialSchema:

    def test_code_tables_match_the_service_codes(self):
        """Seeded lookup rows are the codes the service reads and writes"""
        revision = _load_revision("20261019_initial_schema.py")

        assert revision.PROPERTY_TYPES == list(code_table(ValueType))
        assert revision.FILTER_TYPES == list(code_table(FilterKind))
        assert revision.SORT_TYPES == list(code_table(SortDirection))
        assert dict(revision.PROPERTY_TYPES)[7] == "datetime"
        assert dict(revision.FILTER_TYPES)[5] == "Is Inside Range"

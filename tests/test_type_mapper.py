"""Tests for the per-format type tables."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "packages" / "core_engine" / "src"))

from erd_core.type_mapper import dsl_type_name, is_dsl_scalar, is_known_type, map_type
from erd_core.types import ScalarKind


class TestSQLTypes:
    @pytest.mark.parametrize(
        "token,expected",
        [
            ("VARCHAR(255)", ScalarKind.TEXT),
            ("serial", ScalarKind.INTEGER),
            ("BIGSERIAL", ScalarKind.BIG_INTEGER),
            ("NUMERIC(10,2)", ScalarKind.DECIMAL),
            ("double precision", ScalarKind.FLOAT),
            ("timestamptz", ScalarKind.DATETIME),
            ("jsonb", ScalarKind.JSON),
            ("bytea", ScalarKind.BYTES),
            ("uuid", ScalarKind.TEXT),
        ],
    )
    def test_common_tokens(self, token, expected):
        assert map_type("sql", token) == expected

    def test_unknown_token_falls_back_to_text(self):
        assert map_type("sql", "geometry") == ScalarKind.TEXT
        assert map_type("sql", "") == ScalarKind.TEXT

    def test_known_type_check_ignores_parameters(self):
        assert is_known_type("sql", "varchar(10)")
        assert not is_known_type("sql", "idx_email")


class TestJSONTypes:
    def test_number_maps_to_integer(self):
        assert map_type("json", "number") == ScalarKind.INTEGER

    def test_format_refines_base_type(self):
        assert map_type("json", "string", "date-time") == ScalarKind.DATETIME
        assert map_type("json", "integer", "int64") == ScalarKind.BIG_INTEGER

    def test_unknown_format_keeps_base_type(self):
        assert map_type("json", "string", "email") == ScalarKind.TEXT

    def test_format_ignored_outside_json(self):
        assert map_type("sql", "text", "date-time") == ScalarKind.TEXT


class TestDSLTypes:
    def test_scalars_round_trip_through_names(self):
        for kind in (ScalarKind.TEXT, ScalarKind.INTEGER, ScalarKind.BIG_INTEGER, ScalarKind.DATETIME):
            assert map_type("dsl", dsl_type_name(kind)) == kind

    def test_scalar_check_is_case_sensitive(self):
        assert is_dsl_scalar("String")
        assert not is_dsl_scalar("string")
        assert not is_dsl_scalar("User")

    def test_unknown_source_format(self):
        assert map_type("yaml", "int") == ScalarKind.TEXT

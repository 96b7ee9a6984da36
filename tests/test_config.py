"""Tests for conversion settings and source loading."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "packages" / "core_engine" / "src"))

from erd_core.config import DEFAULT_EXTENSIONS, ConversionConfig, load_config
from erd_core.loader import load_source


class TestConversionConfig:
    def test_defaults(self):
        config = ConversionConfig()
        assert config.extensions == DEFAULT_EXTENSIONS
        assert config.foreign_key_suffixes == ("Id",)
        assert config.reject_name_collisions is True
        assert config.format_for("PRISMA") == "dsl"
        assert config.format_for("txt") == ""

    def test_from_dict_normalizes(self):
        config = ConversionConfig.from_dict(
            {"extensions": {".DDL": "SQL"}, "foreign_key_suffixes": "_id", "header_comment": "Imported"}
        )
        assert config.extensions == {"ddl": "sql"}
        assert config.foreign_key_suffixes == ("_id",)
        assert config.header_comment == "Imported"

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="Unknown config keys: colour"):
            ConversionConfig.from_dict({"colour": "blue"})

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError, match="Unknown source formats"):
            ConversionConfig.from_dict({"extensions": {"yml": "yaml"}})


class TestLoadConfig:
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "erd.yaml"
        path.write_text(
            "foreign_key_suffixes:\n  - Id\n  - _id\nreject_name_collisions: false\n",
            encoding="utf-8",
        )
        config = load_config(str(path))
        assert config.foreign_key_suffixes == ("Id", "_id")
        assert config.reject_name_collisions is False

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(str(path)) == ConversionConfig()

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))


class TestLoadSource:
    def test_returns_text_and_name(self, tmp_path):
        path = tmp_path / "schema.prisma"
        path.write_text("model A {\n  id Int @id\n}\n", encoding="utf-8")
        text, name = load_source(str(path))
        assert name == "schema.prisma"
        assert text.startswith("model A")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_source(str(tmp_path / "missing.sql"))

"""Tests du module config."""

import json
from pathlib import Path

import pytest

from combler.config import (
    ColumnMapping,
    ColumnPair,
    ComparisonOptions,
    Config,
    ConfigError,
    suggest_mapping,
)


def _base(**extra: object) -> dict:
    d: dict = {
        "source_file": "a.xlsx",
        "target_file": "b.csv",
        "mapping": {"keys": [{"source": "id", "target": "id"}], "values": []},
    }
    d.update(extra)
    return d


def test_config_resolve_paths(tmp_path: Path) -> None:
    """Les chemins relatifs sont résolus par rapport au dossier du fichier config."""
    config_dir = tmp_path / "mon_projet"
    config_dir.mkdir()
    (config_dir / "data").mkdir()

    config = Config(source_file="data/source.xlsx", target_file="data/cible.csv")
    config.resolve_paths(config_dir)

    assert Path(config.source_file).name == "source.xlsx"
    assert Path(config.source_file).parent.parent == config_dir.resolve()


def test_config_load_resolves_paths(tmp_path: Path) -> None:
    """Config.load() résout automatiquement les chemins relatifs."""
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(_base(source_file="data/a.xlsx")), encoding="utf-8")

    config = Config.load(config_path)
    assert Path(config.source_file).is_absolute()
    assert "data" in config.source_file


def test_config_defaults() -> None:
    config = Config.from_dict(_base())
    assert config.options == ComparisonOptions(only_fill_empty=True, ignore_case=True, normalize_whitespace=True)
    assert config.source_header_row == 1
    assert config.source_sheet is None
    assert config.mapping.key_columns_a == ["id"]


def test_config_options() -> None:
    config = Config.from_dict(_base(options={"only_fill_empty": False, "ignore_case": False}))
    assert config.options.only_fill_empty is False
    assert config.options.ignore_case is False
    assert config.options.normalize_whitespace is True


def test_config_validation_missing_files() -> None:
    with pytest.raises(ConfigError, match="source_file et target_file requis"):
        Config.from_dict({"mapping": {"keys": [{"source": "a", "target": "b"}]}})


def test_config_validation_no_key() -> None:
    with pytest.raises(ConfigError, match="au moins une paire de colonnes clés"):
        Config.from_dict(_base(mapping={"keys": [], "values": []}))


def test_config_validation_header_row() -> None:
    with pytest.raises(ConfigError, match="target_header_row doit être >= 1"):
        Config.from_dict(_base(target_header_row=0))
    with pytest.raises(ConfigError, match="header_row doit être un entier"):
        Config.from_dict(_base(source_header_row="abc"))


def test_config_validation_option_type() -> None:
    with pytest.raises(ConfigError, match="ignore_case doit être un booléen"):
        Config.from_dict(_base(options={"ignore_case": "oui"}))


def test_config_round_trip() -> None:
    config = Config.from_dict(_base(options={"only_fill_empty": False}))
    assert Config.from_dict(config.to_dict()) == config


def test_mapping_parallel_lists() -> None:
    mapping = ColumnMapping.from_dict(
        {
            "key_columns_a": ["id", "annee"],
            "key_columns_b": ["ref", "year"],
            "source_columns": ["nom"],
            "target_columns": ["name"],
        }
    )
    assert mapping.keys == [ColumnPair("id", "ref"), ColumnPair("annee", "year")]
    assert mapping.key_columns_b == ["ref", "year"]
    assert mapping.source_columns == ["nom"]
    assert mapping.target_columns == ["name"]


def test_mapping_parallel_lists_length_mismatch() -> None:
    with pytest.raises(ConfigError, match="même longueur"):
        ColumnMapping.from_dict({"key_columns_a": ["id"], "key_columns_b": []})


def test_mapping_missing_columns() -> None:
    mapping = ColumnMapping(
        keys=[ColumnPair("id", "id")],
        values=[ColumnPair("nom", "name"), ColumnPair("email", "mail")],
    )
    missing = mapping.missing_columns(["id", "nom"], ["id", "name"])
    assert missing == ["source.email", "target.mail"]


def test_suggest_mapping() -> None:
    mapping = suggest_mapping(["id", "nom", "ville"], ["ref", "name"])
    assert mapping.keys == [ColumnPair("id", "ref")]
    assert mapping.values == [ColumnPair("nom", "name")]


def test_suggest_mapping_single_column() -> None:
    mapping = suggest_mapping(["id"], [])
    assert mapping.keys == [ColumnPair("id", "")]
    assert mapping.values == [ColumnPair("id", "")]

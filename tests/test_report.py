"""Tests du module report."""

import pytest

from combler.config import ColumnMapping, ColumnPair, Config, DEFAULT_OPTIONS
from combler.matching.schema import ColumnChange, MatchResult, MatchStatus
from combler.report import build_report_df, print_report_console, summarize


@pytest.fixture
def sample_results() -> list[MatchResult]:
    return [
        MatchResult(0, 0, "a", [ColumnChange("nom", "", "Dupont", True)], 1, MatchStatus.MATCHED),
        MatchResult(1, None, "b", [], 0, MatchStatus.NO_MATCH),
        MatchResult(2, 1, "c", [], 1, MatchStatus.DUPLICATE),
        MatchResult(3, 3, "d", [], 1, MatchStatus.NO_SOURCE_VALUE),
        MatchResult(4, 4, "e", [ColumnChange("nom", "", "Martin", True)], 1, MatchStatus.MATCHED),
    ]


@pytest.fixture
def sample_config() -> Config:
    return Config(
        source_file="a.xlsx",
        target_file="b.csv",
        mapping=ColumnMapping(keys=[ColumnPair("id", "ref")], values=[ColumnPair("nom", "name")]),
        options=DEFAULT_OPTIONS,
    )


def test_summarize(sample_results: list[MatchResult]) -> None:
    summary = summarize(sample_results, {0})
    assert summary.total == 5
    assert summary.matched == 2
    assert summary.no_match == 1
    assert summary.duplicate == 1
    assert summary.no_source_value == 1
    assert summary.with_changes == 2
    assert summary.selected == 1


def test_summarize_without_selection(sample_results: list[MatchResult]) -> None:
    assert summarize(sample_results).selected == 0
    assert summarize([]).total == 0


def test_build_report_df_counts(sample_results: list[MatchResult], sample_config: Config) -> None:
    df = build_report_df(sample_results, sample_config, {0, 4})
    assert df[df["Key"] == "nb_target_rows"]["Value"].values[0] == 5
    assert df[df["Key"] == "nb_matched"]["Value"].values[0] == 2
    assert df[df["Key"] == "nb_no_match"]["Value"].values[0] == 1
    assert df[df["Key"] == "nb_duplicate"]["Value"].values[0] == 1
    assert df[df["Key"] == "nb_selected"]["Value"].values[0] == 2


def test_build_report_df_contains_params(sample_results: list[MatchResult], sample_config: Config) -> None:
    df = build_report_df(sample_results, sample_config)
    keys = df["Key"].tolist()
    assert "only_fill_empty" in keys
    assert "version" in keys
    assert "timestamp" in keys
    assert df[df["Key"] == "key_0"]["Value"].values[0] == "id->ref"
    assert df[df["Key"] == "value_0"]["Value"].values[0] == "nom->name"


def test_print_report_console_no_error(sample_results: list[MatchResult], capsys: pytest.CaptureFixture) -> None:
    print_report_console(sample_results, {0})
    out = capsys.readouterr().out
    assert "Combler Report" in out
    assert "Lignes cible" in out
    assert "5" in out

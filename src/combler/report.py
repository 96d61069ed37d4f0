"""Génération du rapport de comparaison et de l'onglet REPORT."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import AbstractSet, Sequence

import pandas as pd

from combler import __version__
from combler.config import Config
from combler.matching.schema import MatchResult, MatchStatus


@dataclass(frozen=True)
class ComparisonSummary:
    """Compteurs affichés après une comparaison."""

    total: int
    matched: int
    no_match: int
    duplicate: int
    no_source_value: int
    with_changes: int
    selected: int


def summarize(results: Sequence[MatchResult], selected: AbstractSet[int] | None = None) -> ComparisonSummary:
    """Compte les lignes par statut, les lignes avec modifications et la sélection."""

    def _count(status: MatchStatus) -> int:
        return sum(1 for r in results if r.status == status)

    return ComparisonSummary(
        total=len(results),
        matched=_count(MatchStatus.MATCHED),
        no_match=_count(MatchStatus.NO_MATCH),
        duplicate=_count(MatchStatus.DUPLICATE),
        no_source_value=_count(MatchStatus.NO_SOURCE_VALUE),
        with_changes=sum(1 for r in results if r.has_changes),
        selected=len(selected) if selected is not None else 0,
    )


def build_report_df(
    results: Sequence[MatchResult],
    config: Config,
    selected: AbstractSet[int] | None = None,
) -> pd.DataFrame:
    """
    Construit le DataFrame pour l'onglet REPORT.

    Contient : compteurs par statut, options, colonnes clés et valeurs,
    horodatage, version.
    """
    summary = summarize(results, selected)
    rows = [
        ("Metric", "Value"),
        ("nb_target_rows", summary.total),
        ("nb_matched", summary.matched),
        ("nb_no_match", summary.no_match),
        ("nb_duplicate", summary.duplicate),
        ("nb_no_source_value", summary.no_source_value),
        ("nb_with_changes", summary.with_changes),
        ("nb_selected", summary.selected),
        ("", ""),
        ("Options", ""),
    ]
    rows.extend((name, value) for name, value in config.options.to_dict().items())
    rows.extend([("", ""), ("Keys", "")])
    for i, pair in enumerate(config.mapping.keys):
        rows.append((f"key_{i}", f"{pair.source}->{pair.target}"))
    rows.extend([("", ""), ("Values", "")])
    for i, pair in enumerate(config.mapping.values):
        rows.append((f"value_{i}", f"{pair.source}->{pair.target}"))
    rows.extend(
        [
            ("", ""),
            ("timestamp", datetime.now().isoformat()),
            ("version", __version__),
        ]
    )

    return pd.DataFrame(rows, columns=["Key", "Value"])


def print_report_console(results: Sequence[MatchResult], selected: AbstractSet[int] | None = None) -> None:
    """Affiche un résumé du rapport en console."""
    summary = summarize(results, selected)
    print("\n=== Combler Report ===")
    print(f"  Lignes cible:        {summary.total}")
    print(f"  Appariées:           {summary.matched}")
    print(f"  Sans correspondance: {summary.no_match}")
    print(f"  Doublons:            {summary.duplicate}")
    print(f"  Sans valeur source:  {summary.no_source_value}")
    print(f"  Avec modifications:  {summary.with_changes}")
    print(f"  Sélectionnées:       {summary.selected}")
    print(f"  Version:             {__version__}")
    print("======================\n")

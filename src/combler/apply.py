"""Application des modifications sélectionnées à la cible."""

from __future__ import annotations

from pathlib import Path
from typing import AbstractSet, Sequence

import pandas as pd

from combler.dataset import Dataset
from combler.io_excel import DatasetFileError
from combler.matching.schema import MatchResult
from combler.normalize import is_missing


def apply_changes(
    target: Dataset,
    results: Sequence[MatchResult],
    selected_rows: AbstractSet[int],
) -> Dataset:
    """
    Applique les modifications des lignes sélectionnées.

    Args:
        target: Dataset cible (non modifié).
        results: Résultats de comparaison.
        selected_rows: Positions (row_index_b) validées par l'utilisateur.

    Returns:
        Nouveau Dataset cible : même longueur, même ordre, mêmes en-têtes et format.
    """
    by_row = {r.row_index_b: r for r in results}

    rows = []
    for idx, row in enumerate(target.rows):
        updated = dict(row)
        result = by_row.get(idx)
        if idx in selected_rows and result is not None:
            for change in result.changes:
                updated[change.column] = change.new_value
        rows.append(updated)

    return target.with_rows(rows)


def default_selection(results: Sequence[MatchResult]) -> set[int]:
    """Sélection proposée après comparaison : toutes les lignes ayant au moins une modification."""
    return {r.row_index_b for r in results if r.has_changes}


def _display(val: object) -> str:
    return "" if is_missing(val) else str(val)


def build_changes_df(results: Sequence[MatchResult]) -> pd.DataFrame:
    """DataFrame d'audit : une ligne par ligne cible, avec le détail des modifications."""
    rows = []
    for r in results:
        rows.append(
            {
                "row_index_b": r.row_index_b,
                "matched_row_a": r.matched_row_a if r.matched_row_a is not None else "",
                "key_value": r.key_value,
                "status": r.status.value,
                "confidence": r.confidence,
                "nb_changes": len(r.changes),
                "changes": "; ".join(
                    f"{c.column}: {_display(c.old_value)!r} -> {_display(c.new_value)!r}" for c in r.changes
                ),
            }
        )
    columns = ["row_index_b", "matched_row_a", "key_value", "status", "confidence", "nb_changes", "changes"]
    return pd.DataFrame(rows, columns=columns)


def build_changes_csv(
    results: Sequence[MatchResult],
    output_path: str | Path,
) -> None:
    """Génère le CSV d'audit des modifications proposées (crée le dossier si besoin)."""
    path = Path(output_path)
    df = build_changes_df(results)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(path, index=False, encoding="utf-8")
    except OSError as e:
        raise DatasetFileError(f"Impossible d'écrire {path}: {e}") from e

"""Moteur de comparaison : appariement par clé, détection des doublons, calcul des modifications."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from combler.config import ColumnMapping, ComparisonOptions
from combler.dataset import Dataset
from combler.matching.indexer import build_index
from combler.matching.schema import ColumnChange, MatchResult, MatchStatus
from combler.normalize import composite_key, is_blank, is_missing

LOGGER = logging.getLogger(__name__)


def _same_value(old: Any, new: Any) -> bool:
    """Égalité brute, sans normalisation. Une valeur absente n'est égale à rien."""
    if is_missing(old) or is_missing(new):
        return False
    try:
        return bool(old == new)
    except (TypeError, ValueError):
        return False


class Matcher:
    """Comparaison d'un fichier source (A) et d'un fichier cible (B)."""

    def __init__(self, mapping: ColumnMapping, options: ComparisonOptions) -> None:
        self.mapping = mapping
        self.options = options

    def run(self, source: Dataset, target: Dataset) -> list[MatchResult]:
        """
        Compare chaque ligne cible à l'index des lignes source.

        Returns:
            Liste de MatchResult, un par ligne cible, dans l'ordre des lignes cible.
        """
        key_columns_b = self.mapping.key_columns_b
        source_index = build_index(source.rows, self.mapping.key_columns_a, self.options)

        results: list[MatchResult] = []
        for target_idx, target_row in enumerate(target.rows):
            key = composite_key(target_row, key_columns_b, self.options)
            positions = source_index.get(key, [])

            if not positions:
                results.append(
                    MatchResult(
                        row_index_b=target_idx,
                        matched_row_a=None,
                        key_value=key,
                        changes=[],
                        confidence=0,
                        status=MatchStatus.NO_MATCH,
                    )
                )
            elif len(positions) > 1:
                # Clé ambiguë : la première ligne source est retenue, aucune modification
                results.append(
                    MatchResult(
                        row_index_b=target_idx,
                        matched_row_a=positions[0],
                        key_value=key,
                        changes=[],
                        confidence=1,
                        status=MatchStatus.DUPLICATE,
                    )
                )
            else:
                source_idx = positions[0]
                changes = self.diff_row(source.rows[source_idx], target_row)
                results.append(
                    MatchResult(
                        row_index_b=target_idx,
                        matched_row_a=source_idx,
                        key_value=key,
                        changes=changes,
                        confidence=1,
                        status=MatchStatus.MATCHED if changes else MatchStatus.NO_SOURCE_VALUE,
                    )
                )

        LOGGER.debug(
            "Comparaison %s -> %s: %d lignes cible, %d clés source",
            source.name,
            target.name,
            len(results),
            len(source_index),
        )
        return results

    def diff_row(self, source_row: Mapping[str, Any], target_row: Mapping[str, Any]) -> list[ColumnChange]:
        """
        Calcule les modifications à appliquer à une ligne cible appariée.

        Une modification est retenue si la cellule cible est vide (ou only_fill_empty
        est désactivé), si la valeur source n'est pas vide et si les deux valeurs diffèrent.
        """
        changes: list[ColumnChange] = []
        for pair in self.mapping.values:
            old_value = target_row.get(pair.target)
            new_value = source_row.get(pair.source)
            is_empty = is_blank(old_value)

            if not is_empty and self.options.only_fill_empty:
                continue
            if is_blank(new_value):
                continue
            if _same_value(old_value, new_value):
                continue

            changes.append(
                ColumnChange(
                    column=pair.target,
                    old_value=old_value,
                    new_value=new_value,
                    is_empty=is_empty,
                )
            )
        return changes


def compare(
    source: Dataset,
    target: Dataset,
    mapping: ColumnMapping,
    options: ComparisonOptions,
) -> list[MatchResult]:
    """Compare source et cible. Fonction pure, déterministe pour des entrées identiques."""
    return Matcher(mapping, options).run(source, target)

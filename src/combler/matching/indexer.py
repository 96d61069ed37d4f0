"""Index des lignes source par clé composite."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from combler.config import ComparisonOptions
from combler.normalize import composite_key


def build_index(
    rows: Sequence[Mapping[str, Any]],
    key_columns: Sequence[str],
    options: ComparisonOptions,
) -> dict[str, list[int]]:
    """
    Construit un index : clé composite -> liste d'indices de lignes.

    Les indices sont conservés dans l'ordre de lecture. Aucune déduplication :
    une clé partagée par plusieurs lignes donne une liste de plusieurs indices.

    Args:
        rows: Lignes source.
        key_columns: Colonnes clés (ordre significatif).
        options: Options de normalisation.

    Returns:
        Dict {clé: [indices]}.
    """
    index: dict[str, list[int]] = {}
    for idx, row in enumerate(rows):
        key = composite_key(row, key_columns, options)
        if key not in index:
            index[key] = []
        index[key].append(idx)
    return index


def find_duplicate_keys(index: Mapping[str, list[int]]) -> dict[str, list[int]]:
    """Retourne les clés partagées par au moins deux lignes."""
    return {key: positions for key, positions in index.items() if len(positions) > 1}

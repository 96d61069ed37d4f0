"""Schémas et types pour le matching."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MatchStatus(str, Enum):
    """Classement d'une ligne cible après comparaison."""

    MATCHED = "matched"
    NO_MATCH = "no-match"
    DUPLICATE = "duplicate"
    NO_SOURCE_VALUE = "no-source-value"


@dataclass(frozen=True)
class ColumnChange:
    """Modification proposée pour une cellule de la cible."""

    column: str  # colonne cible
    old_value: Any
    new_value: Any
    is_empty: bool  # la cellule était vide avant modification

    def __repr__(self) -> str:
        return f"ColumnChange({self.column}: {self.old_value!r} -> {self.new_value!r})"


@dataclass(frozen=True)
class MatchResult:
    """Résultat de comparaison pour une ligne cible."""

    row_index_b: int
    matched_row_a: int | None
    key_value: str
    changes: list[ColumnChange] = field(default_factory=list)
    confidence: int = 0  # 0 ou 1
    status: MatchStatus = MatchStatus.NO_MATCH

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)

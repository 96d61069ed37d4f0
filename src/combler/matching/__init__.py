"""Module de matching et calcul des modifications."""

from combler.matching.indexer import build_index, find_duplicate_keys
from combler.matching.matcher import Matcher, compare
from combler.matching.schema import ColumnChange, MatchResult, MatchStatus

__all__ = [
    "ColumnChange",
    "MatchResult",
    "MatchStatus",
    "Matcher",
    "build_index",
    "compare",
    "find_duplicate_keys",
]

"""Normalisation des valeurs de clé et détection des cellules vides."""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

import pandas as pd

from combler.config import ComparisonOptions

KEY_SEPARATOR = "||"

_WHITESPACE_RE = re.compile(r"\s+")


def is_missing(value: Any) -> bool:
    """True si la valeur est absente (None, NaN, pd.NA, NaT)."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # Valeurs non scalaires (listes, tableaux) : jamais considérées absentes
        return False


def is_blank(value: Any) -> bool:
    """True si la valeur est absente ou vide après conversion en chaîne et strip."""
    return is_missing(value) or str(value).strip() == ""


def normalize_value(value: Any, options: ComparisonOptions) -> str:
    """
    Normalise une valeur pour la comparaison des clés.

    Ordre fixe : strip → espaces multiples → espace simple → minuscules.

    Args:
        value: Valeur brute (None/NaN → chaîne vide, sinon str()).
        options: Options de comparaison (normalize_whitespace, ignore_case).

    Returns:
        Chaîne normalisée.
    """
    text = "" if is_missing(value) else str(value)
    text = text.strip()
    if options.normalize_whitespace:
        text = _WHITESPACE_RE.sub(" ", text)
    if options.ignore_case:
        text = text.lower()
    return text


def composite_key(row: Mapping[str, Any], columns: Sequence[str], options: ComparisonOptions) -> str:
    """
    Construit la clé composite d'une ligne : valeurs normalisées jointes par '||'.

    Une colonne absente de la ligne compte comme une valeur vide.
    """
    return KEY_SEPARATOR.join(normalize_value(row.get(col), options) for col in columns)

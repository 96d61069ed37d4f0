"""Représentation en mémoire d'un fichier tabulaire décodé."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

import pandas as pd


class DatasetFormat(str, Enum):
    """Format d'origine du fichier (utilisé pour réécrire dans le même format)."""

    CSV = "csv"
    XLSX = "xlsx"


@dataclass(frozen=True)
class Dataset:
    """
    Un fichier décodé : en-têtes ordonnés et lignes (dict en-tête → valeur).

    La position d'une ligne est son identité pendant une comparaison.
    Un Dataset n'est jamais modifié : with_rows() en construit un nouveau.
    """

    name: str
    headers: list[str]
    rows: list[dict[str, Any]] = field(default_factory=list)
    format: DatasetFormat = DatasetFormat.CSV

    def __len__(self) -> int:
        return len(self.rows)

    def with_rows(self, rows: Iterable[dict[str, Any]]) -> Dataset:
        """Nouveau Dataset avec les mêmes nom, en-têtes et format."""
        return dataclasses.replace(self, rows=list(rows))

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, name: str, format: DatasetFormat) -> Dataset:
        """Construit un Dataset depuis un DataFrame. Les cellules manquantes deviennent ''."""
        headers = [str(c) for c in df.columns]
        frame = df.copy()
        frame.columns = headers
        frame = frame.astype(object).where(frame.notna(), "")
        rows = frame.to_dict(orient="records")
        return cls(name=name, headers=headers, rows=rows, format=format)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convertit en DataFrame, colonnes dans l'ordre des en-têtes.

        Les clés absentes des en-têtes sont ignorées, les cellules absentes valent ''.
        """
        records = [[row.get(h, "") for h in self.headers] for row in self.rows]
        return pd.DataFrame(records, columns=self.headers, dtype=object)

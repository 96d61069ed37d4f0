"""Configuration, mapping de colonnes et chargement du fichier config JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence


class CombleError(Exception):
    """Exception de base pour Combler."""


class ConfigError(CombleError, ValueError):
    """Erreur de validation de la configuration."""


class ConfigFileError(CombleError):
    """Erreur de chargement du fichier de configuration (fichier absent, JSON invalide)."""


@dataclass(frozen=True)
class ColumnPair:
    """Correspondance entre une colonne du fichier A (source) et une colonne du fichier B (cible)."""

    source: str
    target: str

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ColumnPair:
        source = d.get("source", "")
        target = d.get("target", "")
        if not isinstance(source, str) or not isinstance(target, str):
            raise ConfigError(f"source et target doivent être des chaînes (got {d!r})")
        return cls(source=source, target=target)

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "target": self.target}


def _pairs_from_parallel(d: dict[str, Any], left: str, right: str) -> list[ColumnPair]:
    cols_a = list(d.get(left, []))
    cols_b = list(d.get(right, []))
    if len(cols_a) != len(cols_b):
        raise ConfigError(
            f"{left} et {right} doivent avoir la même longueur (got {len(cols_a)} et {len(cols_b)})"
        )
    return [ColumnPair(str(a), str(b)) for a, b in zip(cols_a, cols_b)]


@dataclass
class ColumnMapping:
    """
    Mapping des colonnes entre les deux fichiers.

    keys: paires de colonnes clés (identifient les lignes correspondantes).
    values: paires de colonnes à recopier de A vers B.
    """

    keys: list[ColumnPair] = field(default_factory=list)
    values: list[ColumnPair] = field(default_factory=list)

    @property
    def key_columns_a(self) -> list[str]:
        return [p.source for p in self.keys]

    @property
    def key_columns_b(self) -> list[str]:
        return [p.target for p in self.keys]

    @property
    def source_columns(self) -> list[str]:
        return [p.source for p in self.values]

    @property
    def target_columns(self) -> list[str]:
        return [p.target for p in self.values]

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ColumnMapping:
        """
        Construit le mapping depuis un dict.

        Deux formes acceptées :
        - paires : {"keys": [{"source": .., "target": ..}], "values": [...]}
        - listes parallèles : key_columns_a / key_columns_b, source_columns / target_columns
        """
        if "keys" in d or "values" in d:
            keys = [ColumnPair.from_dict(p) for p in d.get("keys", [])]
            values = [ColumnPair.from_dict(p) for p in d.get("values", [])]
        else:
            keys = _pairs_from_parallel(d, "key_columns_a", "key_columns_b")
            values = _pairs_from_parallel(d, "source_columns", "target_columns")
        return cls(keys=keys, values=values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "keys": [p.to_dict() for p in self.keys],
            "values": [p.to_dict() for p in self.values],
        }

    def missing_columns(self, source_headers: Sequence[str], target_headers: Sequence[str]) -> list[str]:
        """Liste les colonnes du mapping absentes des en-têtes (source.<col>, target.<col>)."""
        src = set(source_headers)
        tgt = set(target_headers)
        missing: list[str] = []
        for pair in [*self.keys, *self.values]:
            if pair.source not in src and f"source.{pair.source}" not in missing:
                missing.append(f"source.{pair.source}")
            if pair.target not in tgt and f"target.{pair.target}" not in missing:
                missing.append(f"target.{pair.target}")
        return missing


@dataclass(frozen=True)
class ComparisonOptions:
    """Options de comparaison. Pas de valeurs par défaut : l'appelant les fournit."""

    only_fill_empty: bool
    ignore_case: bool
    normalize_whitespace: bool

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ComparisonOptions:
        values: dict[str, bool] = {}
        for name in ("only_fill_empty", "ignore_case", "normalize_whitespace"):
            val = d.get(name, True)
            if not isinstance(val, bool):
                raise ConfigError(f"{name} doit être un booléen (got {val!r})")
            values[name] = val
        return cls(**values)

    def to_dict(self) -> dict[str, bool]:
        return {
            "only_fill_empty": self.only_fill_empty,
            "ignore_case": self.ignore_case,
            "normalize_whitespace": self.normalize_whitespace,
        }


DEFAULT_OPTIONS = ComparisonOptions(only_fill_empty=True, ignore_case=True, normalize_whitespace=True)


def suggest_mapping(source_headers: Sequence[str], target_headers: Sequence[str]) -> ColumnMapping:
    """
    Propose un mapping initial : première colonne comme clé,
    deuxième colonne (ou la première à défaut) comme valeur à recopier.
    """

    def _pick(headers: Sequence[str], idx: int) -> str:
        if len(headers) > idx:
            return headers[idx]
        return headers[0] if headers else ""

    return ColumnMapping(
        keys=[ColumnPair(_pick(source_headers, 0), _pick(target_headers, 0))],
        values=[ColumnPair(_pick(source_headers, 1), _pick(target_headers, 1))],
    )


@dataclass
class Config:
    """Configuration principale de Combler."""

    source_file: str = ""
    target_file: str = ""
    source_sheet: str | None = None  # None = première feuille
    target_sheet: str | None = None
    source_header_row: int = 1
    target_header_row: int = 1

    mapping: ColumnMapping = field(default_factory=ColumnMapping)
    options: ComparisonOptions = DEFAULT_OPTIONS

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Config:
        source_file = d.get("source_file", "")
        target_file = d.get("target_file", "")
        try:
            source_header_row = int(d.get("source_header_row", 1))
            target_header_row = int(d.get("target_header_row", 1))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"header_row doit être un entier: {e}") from e

        if not source_file or not target_file:
            raise ConfigError("source_file et target_file requis")
        if source_header_row < 1:
            raise ConfigError(f"source_header_row doit être >= 1 (got {source_header_row})")
        if target_header_row < 1:
            raise ConfigError(f"target_header_row doit être >= 1 (got {target_header_row})")

        mapping_dict = d.get("mapping", {})
        if not isinstance(mapping_dict, dict):
            raise ConfigError("mapping doit être un objet")
        mapping = ColumnMapping.from_dict(mapping_dict)
        if not mapping.keys:
            raise ConfigError("mapping: au moins une paire de colonnes clés requise")

        options_dict = d.get("options", {})
        if not isinstance(options_dict, dict):
            raise ConfigError("options doit être un objet")

        return cls(
            source_file=source_file,
            target_file=target_file,
            source_sheet=d.get("source_sheet"),
            target_sheet=d.get("target_sheet"),
            source_header_row=source_header_row,
            target_header_row=target_header_row,
            mapping=mapping,
            options=ComparisonOptions.from_dict(options_dict),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_file": self.source_file,
            "target_file": self.target_file,
            "source_sheet": self.source_sheet,
            "target_sheet": self.target_sheet,
            "source_header_row": self.source_header_row,
            "target_header_row": self.target_header_row,
            "mapping": self.mapping.to_dict(),
            "options": self.options.to_dict(),
        }

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """
        Charge la configuration depuis un fichier JSON.

        Raises:
            ConfigFileError: Si le fichier est absent ou le JSON invalide.
            ConfigError: Si la configuration est invalide.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigFileError(f"Fichier de configuration introuvable: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                d = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFileError(f"JSON invalide dans {path}: {e}") from e
        except OSError as e:
            raise ConfigFileError(f"Impossible de lire {path}: {e}") from e

        if not isinstance(d, dict):
            raise ConfigFileError(f"Fichier de configuration invalide: {path} doit contenir un objet JSON")

        config = cls.from_dict(d)
        config.resolve_paths(path.parent)
        return config

    def resolve_paths(self, base_dir: Path) -> None:
        """
        Résout les chemins relatifs par rapport au répertoire de base (ex. dossier du fichier config).

        Modifie source_file et target_file en place.
        """
        base = Path(base_dir)
        if self.source_file and not Path(self.source_file).is_absolute():
            self.source_file = str((base / self.source_file).resolve())
        if self.target_file and not Path(self.target_file).is_absolute():
            self.target_file = str((base / self.target_file).resolve())

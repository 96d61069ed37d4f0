"""
Enchaînement des étapes : chargement → configuration → aperçu → export.

Chaque transition est une fonction pure qui reçoit l'état courant et retourne
un nouvel état. Une transition appelée sans ses données d'entrée lève WizardError.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from combler.apply import apply_changes, default_selection
from combler.config import (
    DEFAULT_OPTIONS,
    ColumnMapping,
    CombleError,
    ComparisonOptions,
    Config,
    ConfigFileError,
    suggest_mapping,
)
from combler.dataset import Dataset
from combler.matching.matcher import compare
from combler.matching.schema import MatchResult

LOGGER = logging.getLogger(__name__)


class WizardError(CombleError):
    """Transition d'étape impossible (données requises absentes)."""


class Step(str, Enum):
    UPLOAD = "upload"
    CONFIGURE = "configure"
    PREVIEW = "preview"
    DOWNLOAD = "download"


@dataclass(frozen=True)
class WizardState:
    """État d'une session de remplissage, transmis d'une étape à l'autre."""

    step: Step = Step.UPLOAD
    source: Dataset | None = None
    target: Dataset | None = None
    mapping: ColumnMapping | None = None
    options: ComparisonOptions = DEFAULT_OPTIONS
    results: list[MatchResult] = field(default_factory=list)
    selected: frozenset[int] = frozenset()
    updated: Dataset | None = None


def reset() -> WizardState:
    return WizardState()


def load_files(state: WizardState, source: Dataset, target: Dataset) -> WizardState:
    """Enregistre les deux fichiers décodés (reste à l'étape UPLOAD)."""
    if state.step != Step.UPLOAD:
        raise WizardError(f"Chargement impossible à l'étape {state.step.value}")
    LOGGER.info(
        "Fichiers chargés: A=%s (%d lignes), B=%s (%d lignes)",
        source.name,
        len(source),
        target.name,
        len(target),
    )
    return dataclasses.replace(state, source=source, target=target)


def proceed_to_configure(state: WizardState) -> WizardState:
    """Passe à la configuration. Propose un mapping si aucun n'est défini."""
    if state.source is None or state.target is None:
        raise WizardError("Les fichiers A et B doivent être chargés avant la configuration")
    mapping = state.mapping or suggest_mapping(state.source.headers, state.target.headers)
    return dataclasses.replace(state, step=Step.CONFIGURE, mapping=mapping)


def configure(state: WizardState, mapping: ColumnMapping, options: ComparisonOptions) -> WizardState:
    if state.step != Step.CONFIGURE:
        raise WizardError(f"Configuration impossible à l'étape {state.step.value}")
    if not mapping.keys:
        raise WizardError("Au moins une paire de colonnes clés est requise")
    return dataclasses.replace(state, mapping=mapping, options=options)


def run_comparison(state: WizardState) -> WizardState:
    """Compare A et B, présélectionne les lignes avec modifications et passe à l'aperçu."""
    if state.step != Step.CONFIGURE:
        raise WizardError(f"Comparaison impossible à l'étape {state.step.value}")
    if state.source is None or state.target is None or state.mapping is None:
        raise WizardError("Fichiers et mapping requis pour la comparaison")
    if not state.mapping.keys:
        raise WizardError("Au moins une paire de colonnes clés est requise")

    results = compare(state.source, state.target, state.mapping, state.options)
    selected = frozenset(default_selection(results))
    LOGGER.info("Comparaison terminée: %d lignes avec modifications", len(selected))
    return dataclasses.replace(state, step=Step.PREVIEW, results=results, selected=selected, updated=None)


def _require_preview(state: WizardState) -> None:
    if state.step != Step.PREVIEW:
        raise WizardError(f"Sélection impossible à l'étape {state.step.value}")


def select_rows(state: WizardState, rows: Iterable[int]) -> WizardState:
    """Remplace la sélection. Les positions hors résultats sont ignorées."""
    _require_preview(state)
    known = {r.row_index_b for r in state.results}
    return dataclasses.replace(state, selected=frozenset(r for r in rows if r in known))


def toggle_row(state: WizardState, row_index: int) -> WizardState:
    _require_preview(state)
    return select_rows(state, state.selected ^ {row_index})


def select_all(state: WizardState) -> WizardState:
    """Sélectionne toutes les lignes ayant des modifications."""
    _require_preview(state)
    return dataclasses.replace(state, selected=frozenset(default_selection(state.results)))


def clear_selection(state: WizardState) -> WizardState:
    _require_preview(state)
    return dataclasses.replace(state, selected=frozenset())


def apply_selection(state: WizardState) -> WizardState:
    """Applique les modifications des lignes sélectionnées et passe à l'export."""
    _require_preview(state)
    if state.target is None or not state.results:
        raise WizardError("Aucun résultat de comparaison à appliquer")
    if not state.selected:
        raise WizardError("Aucune ligne sélectionnée")
    updated = apply_changes(state.target, state.results, state.selected)
    LOGGER.info("%d lignes mises à jour dans %s", len(state.selected), state.target.name)
    return dataclasses.replace(state, step=Step.DOWNLOAD, updated=updated)


def go_back(state: WizardState) -> WizardState:
    """Revient à l'étape précédente en abandonnant les données produites en aval."""
    if state.step == Step.DOWNLOAD:
        return dataclasses.replace(state, step=Step.PREVIEW, updated=None)
    if state.step == Step.PREVIEW:
        return dataclasses.replace(state, step=Step.CONFIGURE, results=[], selected=frozenset(), updated=None)
    if state.step == Step.CONFIGURE:
        return dataclasses.replace(state, step=Step.UPLOAD)
    return state


def save_session(path: Path, config: Config, selected: Iterable[int]) -> None:
    """Sauvegarde la configuration et les lignes validées dans un fichier JSON."""
    data = {
        "config": config.to_dict(),
        "selected": sorted(selected),
    }
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ConfigFileError(f"Impossible d'écrire la session {path}: {e}") from e


def load_session(path: Path) -> tuple[dict[str, Any], set[int]]:
    """
    Charge la configuration (dict) et les lignes validées depuis un fichier JSON.

    Raises:
        ConfigFileError: Si le fichier est absent ou invalide.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigFileError(f"Fichier de session introuvable: {path}") from e
    except OSError as e:
        raise ConfigFileError(f"Impossible de lire {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigFileError(f"JSON invalide dans {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigFileError(f"Fichier de session invalide: {path} doit contenir un objet JSON")
    try:
        selected = {int(v) for v in data.get("selected", [])}
    except (TypeError, ValueError) as e:
        raise ConfigFileError(f"Sélection invalide dans {path}: {e}") from e
    return data.get("config", {}), selected

"""Interface en ligne de commande Combler."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from combler import __version__, wizard
from combler.apply import build_changes_csv
from combler.config import CombleError, Config
from combler.dataset import Dataset
from combler.io_excel import default_output_path, list_sheets, load_dataset, save_dataset, save_xlsx
from combler.matching.indexer import build_index, find_duplicate_keys
from combler.matching.schema import MatchResult
from combler.report import build_report_df, print_report_console

LOGGER = logging.getLogger(__name__)


def _warn_dataset_issues(config: Config, source: Dataset, target: Dataset) -> None:
    """Avertit des colonnes absentes et des clés en double dans la source."""
    missing = config.mapping.missing_columns(source.headers, target.headers)
    if missing:
        LOGGER.warning("Colonnes absentes (traitées comme vides): %s", ", ".join(missing))
    index = build_index(source.rows, config.mapping.key_columns_a, config.options)
    duplicates = find_duplicate_keys(index)
    if duplicates:
        LOGGER.warning(
            "%d clé(s) en double dans %s, les lignes cible correspondantes ne seront pas modifiées",
            len(duplicates),
            source.name,
        )


def _compare_from_config(config: Config) -> wizard.WizardState:
    """Charge les fichiers et exécute les étapes jusqu'à l'aperçu."""
    source = load_dataset(config.source_file, config.source_sheet, header_row=config.source_header_row)
    target = load_dataset(config.target_file, config.target_sheet, header_row=config.target_header_row)
    _warn_dataset_issues(config, source, target)

    state = wizard.load_files(wizard.reset(), source, target)
    state = wizard.proceed_to_configure(state)
    state = wizard.configure(state, config.mapping, config.options)
    return wizard.run_comparison(state)


def cmd_list_sheets(filepath: str) -> int:
    """Liste les feuilles d'un fichier tableur."""
    sheets = list_sheets(filepath)
    print(f"Feuilles dans {filepath}:")
    for s in sheets:
        print(f"  - {s}")
    return 0


def interactive_select(results: list[MatchResult], target: Dataset) -> set[int]:
    """
    Mode interactif : pour chaque ligne avec modifications, demande si elle doit être appliquée.

    Returns:
        Positions des lignes validées.
    """
    selected: set[int] = set()
    pending = [r for r in results if r.has_changes]

    for r in pending:
        print("\n" + "=" * 60)
        print(f"Ligne cible #{r.row_index_b} (clé {r.key_value!r}, source #{r.matched_row_a}):")
        row = target.rows[r.row_index_b]
        for header in target.headers:
            print(f"  {header}: {row.get(header, '')}")
        print("Modifications:")
        for c in r.changes:
            marker = " (vide)" if c.is_empty else ""
            print(f"  {c.column}: {c.old_value!r}{marker} -> {c.new_value!r}")

        while True:
            try:
                inp = input("Appliquer ? (o / n / q pour arrêter): ").strip().lower()
            except EOFError:
                return selected
            if inp == "o":
                selected.add(r.row_index_b)
                break
            if inp == "n":
                break
            if inp == "q":
                return selected
            print("Choix invalide, réessayez.")

    return selected


def cmd_compare(
    config_path: str,
    *,
    changes_path: str | None = None,
    session_path: str | None = None,
) -> int:
    """Compare les fichiers sans rien écrire d'autre que le CSV des modifications."""
    config = Config.load(config_path)
    state = _compare_from_config(config)

    out_changes = Path(changes_path) if changes_path else Path(config_path).parent / "changes.csv"
    build_changes_csv(state.results, str(out_changes))
    print(f"Modifications écrites: {out_changes}")

    if session_path:
        wizard.save_session(Path(session_path), config, state.selected)
        print(f"Session écrite: {session_path}")

    print_report_console(state.results, state.selected)
    return 0


def cmd_run(
    config_path: str,
    output_path: str | None = None,
    *,
    session_path: str | None = None,
    interactive: bool = False,
    changes_path: str | None = None,
    report_path: str | None = None,
) -> int:
    """Exécute le pipeline complet : comparaison, sélection, application, export."""
    config = Config.load(config_path)
    state = _compare_from_config(config)
    if state.target is None:
        raise wizard.WizardError("Fichier cible non chargé")

    if session_path:
        session_config, selected = wizard.load_session(Path(session_path))
        if session_config and session_config.get("mapping") != config.mapping.to_dict():
            LOGGER.warning("Le mapping de la session diffère de la configuration courante")
        state = wizard.select_rows(state, selected)
    elif interactive:
        state = wizard.select_rows(state, interactive_select(state.results, state.target))

    out = Path(output_path) if output_path else default_output_path(config.target_file, state.target.format)
    out_changes = Path(changes_path) if changes_path else out.parent / "changes.csv"
    build_changes_csv(state.results, str(out_changes))
    print(f"Modifications écrites: {out_changes}")

    print_report_console(state.results, state.selected)

    if report_path:
        save_xlsx(report_path, {"REPORT": build_report_df(state.results, config, state.selected)})
        print(f"Rapport écrit: {report_path}")

    if not state.selected:
        print("Aucune ligne sélectionnée: fichier de sortie non écrit.")
        return 0

    state = wizard.apply_selection(state)
    if state.updated is None:
        raise wizard.WizardError("Aucune donnée mise à jour à écrire")
    written = save_dataset(state.updated, out)
    print(f"Fichier de sortie: {written}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="combler",
        description="Remplit les cellules vides d'un tableur (B) à partir d'un autre (A)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default="WARNING", help="Niveau de log (DEBUG, INFO, WARNING...)")

    subparsers = parser.add_subparsers(dest="command", help="Commandes")

    # list-sheets
    p_list = subparsers.add_parser("list-sheets", help="Lister les feuilles d'un tableur")
    p_list.add_argument("file", help="Fichier .xlsx, .xls ou .csv")

    # compare
    p_compare = subparsers.add_parser("compare", help="Comparer sans écrire le fichier de sortie")
    p_compare.add_argument("--config", "-c", required=True, help="Fichier config JSON")
    p_compare.add_argument("--changes", help="Chemin du CSV des modifications")
    p_compare.add_argument("--save-session", help="Sauvegarder config et sélection (JSON)")

    # run
    p_run = subparsers.add_parser("run", help="Comparer et écrire le fichier B mis à jour")
    p_run.add_argument("--config", "-c", required=True, help="Fichier config JSON")
    p_run.add_argument("--output", "-o", help="Fichier de sortie (défaut: <cible>_updated)")
    p_run.add_argument("--session", "-s", help="Reprendre la sélection d'une session sauvegardée")
    p_run.add_argument("--interactive", "-i", action="store_true", help="Valider chaque ligne interactivement")
    p_run.add_argument("--changes", help="Chemin du CSV des modifications")
    p_run.add_argument("--report", help="Fichier xlsx pour l'onglet REPORT")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "list-sheets":
            return cmd_list_sheets(args.file)

        if args.command == "compare":
            return cmd_compare(args.config, changes_path=args.changes, session_path=args.save_session)

        if args.command == "run":
            if args.session and args.interactive:
                parser.error("--session et --interactive sont incompatibles")
            return cmd_run(
                args.config,
                args.output,
                session_path=args.session,
                interactive=args.interactive,
                changes_path=args.changes,
                report_path=args.report,
            )
    except CombleError as e:
        print(f"Erreur: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

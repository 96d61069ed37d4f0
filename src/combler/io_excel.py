"""I/O tableurs : décodage des fichiers en Dataset et réécriture dans le format d'origine."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

import pandas as pd

from combler.config import CombleError
from combler.dataset import Dataset, DatasetFormat

LOGGER = logging.getLogger(__name__)

# Formats supportés
SUPPORTED_INPUT_EXTENSIONS = (".csv", ".xlsx", ".xls")
CSV_DELIMITERS = [",", ";", "\t", "|"]
CSV_ENCODINGS = ("utf-8", "latin-1")
DEFAULT_SHEET_NAME = "Sheet1"


class DatasetFileError(CombleError):
    """Erreur de chargement d'un fichier (fichier absent, feuille inexistante, contenu invalide)."""


class UnsupportedFormatError(DatasetFileError):
    """Extension de fichier non prise en charge."""


def _get_engine(path: Path) -> str | None:
    """Retourne le moteur pandas selon l'extension, ou None pour CSV."""
    suffix = path.suffix.lower()
    if suffix == ".xlsx":
        return "openpyxl"
    if suffix == ".xls":
        return "xlrd"
    return None


def _is_csv(path: Path) -> bool:
    return path.suffix.lower() == ".csv"


def detect_format(filepath: str | Path) -> DatasetFormat:
    """
    Déduit le format d'un fichier depuis son extension.

    Raises:
        UnsupportedFormatError: Si l'extension n'est pas .csv, .xlsx ou .xls.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".csv":
        return DatasetFormat.CSV
    if suffix in (".xlsx", ".xls"):
        return DatasetFormat.XLSX
    raise UnsupportedFormatError(
        f"Format non supporté: {suffix or '(sans extension)'}. "
        f"Formats acceptés: {', '.join(SUPPORTED_INPUT_EXTENSIONS)}"
    )


def _detect_csv_delimiter(path: Path, encoding: str, *, skip_rows: int = 0) -> str:
    """Devine le séparateur sur les premières lignes non vides (',' par défaut)."""
    with path.open("r", encoding=encoding) as f:
        for _ in range(skip_rows):
            if f.readline() == "":
                return ","
        sample_lines: list[str] = []
        for line in f:
            if line.strip() == "":
                continue
            sample_lines.append(line)
            if len(sample_lines) >= 5:
                break
    if not sample_lines:
        return ","
    try:
        return csv.Sniffer().sniff("".join(sample_lines), delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        first = sample_lines[0]
        counts = {d: first.count(d) for d in CSV_DELIMITERS}
        best = max(counts, key=lambda d: counts[d])
        return best if counts[best] > 0 else ","


def _read_csv(path: Path, header_idx: int) -> pd.DataFrame:
    skiprows = range(header_idx) if header_idx > 0 else None
    last_error: Exception | None = None
    for encoding in CSV_ENCODINGS:
        try:
            delimiter = _detect_csv_delimiter(path, encoding, skip_rows=header_idx)
            return pd.read_csv(
                path,
                dtype=str,
                encoding=encoding,
                sep=delimiter,
                skiprows=skiprows,
                skip_blank_lines=True,
                keep_default_na=False,
            )
        except UnicodeDecodeError as e:
            LOGGER.debug("Encodage %s refusé pour %s, essai suivant", encoding, path)
            last_error = e
        except pd.errors.EmptyDataError as e:
            raise DatasetFileError(f"Fichier CSV vide: {path}") from e
        except pd.errors.ParserError as e:
            raise DatasetFileError(
                f"Erreur CSV {path}: {e}. Vérifiez la ligne d'en-tête et le séparateur."
            ) from e
    raise DatasetFileError(f"Erreur CSV {path}: {last_error}")


def list_sheets(filepath: str | Path) -> list[str]:
    """
    Liste les noms des feuilles d'un fichier tableur.

    Un CSV n'a qu'une seule "feuille".

    Raises:
        DatasetFileError: Si le fichier est absent ou illisible.
    """
    path = Path(filepath)
    if not path.exists():
        raise DatasetFileError(f"Fichier introuvable: {path}")
    detect_format(path)
    if _is_csv(path):
        return ["(données)"]
    try:
        with pd.ExcelFile(path, engine=_get_engine(path)) as xl:
            return [str(s) for s in xl.sheet_names]
    except ImportError as e:
        raise DatasetFileError(f"Format .xls requis: pip install xlrd. Détail: {e}") from e
    except Exception as e:
        raise DatasetFileError(f"Impossible de lire le fichier {path}: {e}") from e


def load_sheet(
    filepath: str | Path,
    sheet_name: str | None = None,
    *,
    header_row: int = 1,
) -> pd.DataFrame:
    """
    Charge une feuille dans un DataFrame.

    CSV : tout est lu comme texte (dtype=str). Excel : dtype=object, les nombres
    et dates gardent leur type natif pour être réécrits tels quels.

    Args:
        filepath: Chemin vers le fichier (.csv, .xlsx, .xls).
        sheet_name: Nom de la feuille (None = première). Ignoré pour CSV.
        header_row: Numéro de ligne (1-based) contenant les en-têtes.

    Returns:
        DataFrame chargé.

    Raises:
        UnsupportedFormatError: Si l'extension n'est pas prise en charge.
        DatasetFileError: Si le fichier est absent, illisible ou si la feuille n'existe pas.
    """
    path = Path(filepath)
    if not path.exists():
        raise DatasetFileError(f"Fichier introuvable: {path}")
    detect_format(path)

    header_idx = max(header_row - 1, 0)
    if _is_csv(path):
        return _read_csv(path, header_idx)

    engine = _get_engine(path)
    try:
        xl = pd.ExcelFile(path, engine=engine)
    except ImportError as e:
        raise DatasetFileError("Format .xls requis: pip install xlrd") from e
    except Exception as e:
        raise DatasetFileError(f"Impossible de lire le fichier {path}: {e}") from e

    with xl:
        if sheet_name is None:
            sheet_name = str(xl.sheet_names[0])
        elif sheet_name not in xl.sheet_names:
            sheets = [str(s) for s in xl.sheet_names]
            raise DatasetFileError(
                f"Feuille '{sheet_name}' introuvable dans {path}. Feuilles: {', '.join(sheets)}"
            )
        try:
            return pd.read_excel(xl, sheet_name=sheet_name, dtype=object, header=header_idx)
        except Exception as e:
            raise DatasetFileError(f"Erreur feuille '{sheet_name}' dans {path}: {e}") from e


def load_dataset(
    filepath: str | Path,
    sheet_name: str | None = None,
    *,
    header_row: int = 1,
) -> Dataset:
    """
    Décode un fichier tabulaire en Dataset (en-têtes + lignes).

    Les cellules vides valent ''. Le format est déduit de l'extension.
    """
    path = Path(filepath)
    fmt = detect_format(path)
    df = load_sheet(path, sheet_name, header_row=header_row)
    dataset = Dataset.from_dataframe(df, name=path.name, format=fmt)
    LOGGER.info("%s: %d lignes, %d colonnes", dataset.name, len(dataset.rows), len(dataset.headers))
    return dataset


def save_xlsx(
    filepath: str | Path,
    dataframes: dict[str, pd.DataFrame],
    *,
    index: bool = False,
) -> None:
    """
    Sauvegarde plusieurs DataFrames dans un fichier xlsx (une feuille par DataFrame).

    Args:
        filepath: Chemin de sortie.
        dataframes: Dict {nom_feuille: DataFrame}.
    """
    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        for sheet_name, df in dataframes.items():
            # Excel limite les noms de feuille à 31 caractères
            safe_name = str(sheet_name)[:31]
            df.to_excel(writer, sheet_name=safe_name, index=index)


def save_dataset(dataset: Dataset, filepath: str | Path) -> Path:
    """
    Réécrit un Dataset dans son format d'origine (CSV UTF-8 ou xlsx une feuille).

    Returns:
        Chemin écrit.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = dataset.to_dataframe()
    try:
        if dataset.format == DatasetFormat.CSV:
            df.to_csv(path, index=False, encoding="utf-8")
        else:
            save_xlsx(path, {DEFAULT_SHEET_NAME: df})
    except OSError as e:
        raise DatasetFileError(f"Impossible d'écrire {path}: {e}") from e
    LOGGER.info("%s écrit (%d lignes)", path, len(dataset.rows))
    return path


def default_output_path(input_path: str | Path, format: DatasetFormat | None = None) -> Path:
    """
    Chemin de sortie par défaut à côté du fichier d'entrée.

    ex. cible.csv -> cible_updated.csv ; cible.xls -> cible_updated.xlsx
    """
    path = Path(input_path)
    suffix = path.suffix
    if format is not None and suffix.lower() != f".{format.value}":
        suffix = f".{format.value}"
    return path.with_name(f"{path.stem}_updated{suffix}")

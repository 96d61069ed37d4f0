"""Tests du module I/O tableurs."""

from datetime import datetime
from pathlib import Path

import openpyxl
import pandas as pd

from combler.dataset import Dataset, DatasetFormat
from combler.io_excel import (
    default_output_path,
    detect_format,
    list_sheets,
    load_dataset,
    load_sheet,
    save_dataset,
    save_xlsx,
)


def test_list_sheets(tmp_path: Path) -> None:
    path = tmp_path / "test.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        pd.DataFrame({"a": [1]}).to_excel(w, sheet_name="Feuille1", index=False)
        pd.DataFrame({"x": [1]}).to_excel(w, sheet_name="Feuille2", index=False)
    assert list_sheets(path) == ["Feuille1", "Feuille2"]


def test_list_sheets_csv(tmp_path: Path) -> None:
    path = tmp_path / "test.csv"
    path.write_text("a,b\n1,2\n", encoding="utf-8")
    assert list_sheets(path) == ["(données)"]


def test_load_sheet_default_first(tmp_path: Path) -> None:
    path = tmp_path / "test.xlsx"
    pd.DataFrame({"col": ["a", "b"]}).to_excel(path, index=False, engine="openpyxl")
    df = load_sheet(path)
    assert len(df) == 2
    assert "col" in df.columns


def test_load_sheet_header_row(tmp_path: Path) -> None:
    path = tmp_path / "test.csv"
    path.write_text("Export du 01/01\nid,nom\n1,Dupont\n", encoding="utf-8")
    df = load_sheet(path, header_row=2)
    assert list(df.columns) == ["id", "nom"]
    assert df.iloc[0]["nom"] == "Dupont"


def test_load_dataset_csv_semicolon(tmp_path: Path) -> None:
    path = tmp_path / "cible.csv"
    path.write_text("id;nom;ville\n1;Dupont;\n2;;Lyon\n", encoding="utf-8")
    ds = load_dataset(path)
    assert ds.name == "cible.csv"
    assert ds.format == DatasetFormat.CSV
    assert ds.headers == ["id", "nom", "ville"]
    assert ds.rows == [
        {"id": "1", "nom": "Dupont", "ville": ""},
        {"id": "2", "nom": "", "ville": "Lyon"},
    ]


def test_load_dataset_csv_latin1(tmp_path: Path) -> None:
    path = tmp_path / "cible.csv"
    path.write_bytes("id,ville\n1,Orléans\n".encode("latin-1"))
    ds = load_dataset(path)
    assert ds.rows[0]["ville"] == "Orléans"


def test_load_dataset_xlsx_preserves_text(tmp_path: Path) -> None:
    path = tmp_path / "source.xlsx"
    pd.DataFrame({"id": ["007", "008"], "nom": ["Bond", None]}).to_excel(path, index=False, engine="openpyxl")
    ds = load_dataset(path)
    assert ds.format == DatasetFormat.XLSX
    assert ds.rows[0]["id"] == "007"
    assert ds.rows[1]["nom"] == ""


def test_save_dataset_csv(tmp_path: Path) -> None:
    ds = Dataset(
        name="b.csv",
        headers=["id", "nom"],
        rows=[{"id": "1", "nom": "Dupont", "extra": "ignoré"}, {"id": "2"}],
        format=DatasetFormat.CSV,
    )
    out = save_dataset(ds, tmp_path / "out" / "b_updated.csv")
    assert out.exists()
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines == ["id,nom", "1,Dupont", "2,"]


def test_save_dataset_xlsx(tmp_path: Path) -> None:
    ds = Dataset(
        name="b.xlsx",
        headers=["id", "nom"],
        rows=[{"id": "1", "nom": "Dupont"}, {"id": "2", "nom": ""}],
        format=DatasetFormat.XLSX,
    )
    out = save_dataset(ds, tmp_path / "b_updated.xlsx")
    xl = pd.ExcelFile(out, engine="openpyxl")
    assert xl.sheet_names == ["Sheet1"]
    xl.close()
    reloaded = load_dataset(out)
    assert reloaded.headers == ["id", "nom"]
    assert reloaded.rows[0] == {"id": "1", "nom": "Dupont"}
    assert reloaded.rows[1]["nom"] == ""


def test_save_dataset_xlsx_keeps_cell_types(tmp_path: Path) -> None:
    """Nombres et dates relus d'un xlsx sont réécrits comme nombres et dates, pas comme texte."""
    src = tmp_path / "cible.xlsx"
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["id", "montant", "date", "nom"])
    ws.append([1, 12.5, datetime(2024, 1, 15), None])
    wb.save(src)

    ds = load_dataset(src)
    assert ds.rows[0]["id"] == 1
    assert ds.rows[0]["nom"] == ""
    out = save_dataset(ds, tmp_path / "cible_updated.xlsx")

    ws_out = openpyxl.load_workbook(out).active
    assert ws_out["A2"].data_type == "n"
    assert ws_out["A2"].value == 1
    assert ws_out["B2"].data_type == "n"
    assert ws_out["C2"].data_type == "d"


def test_save_xlsx(tmp_path: Path) -> None:
    path = tmp_path / "out.xlsx"
    save_xlsx(path, {"Sheet1": pd.DataFrame({"a": [1]}), "Sheet2": pd.DataFrame({"b": [2]})})
    xl = pd.ExcelFile(path, engine="openpyxl")
    assert "Sheet1" in xl.sheet_names
    assert "Sheet2" in xl.sheet_names
    xl.close()


def test_detect_format() -> None:
    assert detect_format("a.CSV") == DatasetFormat.CSV
    assert detect_format("a.xlsx") == DatasetFormat.XLSX
    assert detect_format("a.xls") == DatasetFormat.XLSX


def test_default_output_path() -> None:
    assert default_output_path(Path("/tmp/cible.csv")).name == "cible_updated.csv"
    assert default_output_path(Path("/tmp/cible.xlsx")).name == "cible_updated.xlsx"
    assert default_output_path(Path("/tmp/cible.xls"), DatasetFormat.XLSX).name == "cible_updated.xlsx"

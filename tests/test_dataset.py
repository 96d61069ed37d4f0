"""Tests du Dataset."""

import pandas as pd

from combler.dataset import Dataset, DatasetFormat


def test_from_dataframe_missing_cells() -> None:
    df = pd.DataFrame({"id": ["1", "2"], "nom": ["Dupont", None]})
    ds = Dataset.from_dataframe(df, name="b.csv", format=DatasetFormat.CSV)
    assert ds.headers == ["id", "nom"]
    assert ds.rows == [{"id": "1", "nom": "Dupont"}, {"id": "2", "nom": ""}]


def test_to_dataframe_header_order() -> None:
    ds = Dataset(
        name="b.csv",
        headers=["nom", "id"],
        rows=[{"id": "1", "nom": "Dupont"}, {"id": "2"}],
        format=DatasetFormat.CSV,
    )
    df = ds.to_dataframe()
    assert list(df.columns) == ["nom", "id"]
    assert df.iloc[1]["nom"] == ""


def test_with_rows_keeps_metadata() -> None:
    ds = Dataset(name="b.xlsx", headers=["id"], rows=[{"id": "1"}], format=DatasetFormat.XLSX)
    other = ds.with_rows([{"id": "2"}])
    assert other.rows == [{"id": "2"}]
    assert other.name == "b.xlsx"
    assert other.format == DatasetFormat.XLSX
    assert ds.rows == [{"id": "1"}]
    assert len(other) == 1

"""Crée des fichiers de démonstration pour Combler (source.xlsx, cible.csv, config.json)."""

import json
from pathlib import Path

import pandas as pd

DATA_DIR = Path(__file__).parent / "data"
DATA_DIR.mkdir(exist_ok=True)

source = pd.DataFrame({
    "artiste": ["Daft Punk", "Air", "Justice", "Phoenix", "Phoenix"],
    "album": ["Discovery", "Moon Safari", "Cross", "Alphabetical", "Wolfgang"],
    "annee": ["2001", "1998", "2007", "2004", "2009"],
    "label": ["Virgin", "Source", "Ed Banger", "Source", "Loyauté"],
})

target = pd.DataFrame({
    "Artist": ["daft  punk", "AIR", "Justice", "phoenix", "Sébastien Tellier"],
    "Album": ["Discovery", "Moon Safari", "Cross", "", "Politics"],
    "Year": ["", "1998", "", "", "2004"],
    "Label": ["", "", "Because", "", ""],
})

config = {
    "source_file": "source.xlsx",
    "target_file": "cible.csv",
    "mapping": {
        "keys": [{"source": "artiste", "target": "Artist"}],
        "values": [
            {"source": "album", "target": "Album"},
            {"source": "annee", "target": "Year"},
            {"source": "label", "target": "Label"},
        ],
    },
    "options": {"only_fill_empty": True, "ignore_case": True, "normalize_whitespace": True},
}

source.to_excel(DATA_DIR / "source.xlsx", index=False, engine="openpyxl")
target.to_csv(DATA_DIR / "cible.csv", index=False, encoding="utf-8")
(DATA_DIR / "config.json").write_text(json.dumps(config, indent=2, ensure_ascii=False), encoding="utf-8")
print(f"Fichiers créés dans {DATA_DIR}")

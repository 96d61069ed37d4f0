"""Combler - Remplissage des cellules vides d'un tableur à partir d'un autre."""

from combler.config import CombleError, ConfigError, ConfigFileError
from combler.io_excel import DatasetFileError, UnsupportedFormatError

__all__ = [
    "__version__",
    "CombleError",
    "ConfigError",
    "ConfigFileError",
    "DatasetFileError",
    "UnsupportedFormatError",
]

__version__ = "0.1.0"

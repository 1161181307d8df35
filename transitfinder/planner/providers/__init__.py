from pathlib import Path

from .base import TargetProvider
from .catalog import CsvTargetListProvider
from .flat import FlatTargetListProvider


def get_target_provider(path: Path | str) -> TargetProvider:
    path = Path(path).expanduser()
    if path.suffix.lower() == ".csv":
        return CsvTargetListProvider(catalog_path=path)
    return FlatTargetListProvider(catalog_path=path)


__all__ = [
    "TargetProvider",
    "CsvTargetListProvider",
    "FlatTargetListProvider",
    "get_target_provider",
]

"""lume - shared utilities of a static site generator."""

from lume.concurrency import concurrent, run_concurrently
from lume.config import LumeSettings, merge
from lume.import_map import ImportMap, get_import_map, resolve_import_map
from lume.upgrade import UpgradeNotifier, VersionInfo

__all__ = [
    "ImportMap",
    "LumeSettings",
    "UpgradeNotifier",
    "VersionInfo",
    "concurrent",
    "get_import_map",
    "merge",
    "resolve_import_map",
    "run_concurrently",
]

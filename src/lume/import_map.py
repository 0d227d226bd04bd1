"""Import maps for the module loader.

An import map maps module specifiers (optionally scoped by referrer URL) to
absolute URLs. lume ships a canonical map pointing its own specifiers at the
installed package, and can merge a user map into it.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urljoin, urlsplit, uses_relative
from urllib.request import url2pathname

import httpx
from pydantic import BaseModel, ValidationError

from lume.exceptions import ImportMapError

logger = logging.getLogger(__name__)

SpecifierMap = dict[str, str]

# Remote location of lume modules, redirected to the installed copy
REMOTE_ROOT = "https://deno.land/x/lume/"

# Timeout in seconds for fetching remote import maps
DEFAULT_TIMEOUT = 30.0


class ImportMap(BaseModel):
    """An import map document."""

    imports: SpecifierMap
    scopes: dict[str, SpecifierMap] | None = None

    def to_json(self) -> str:
        return json.dumps(self.model_dump(exclude_none=True), indent=2)


def get_module_root() -> str:
    """Return the file URL of the installed lume package, with a trailing slash."""
    return Path(__file__).resolve().parent.as_uri() + "/"


def _check_url(url: str) -> None:
    """Raise ValueError if the host or port of `url` is malformed."""
    parts = urlsplit(url)
    if any(char.isspace() for char in parts.netloc):
        raise ValueError(f"invalid host in {url!r}")
    # Raises ValueError for a port that is not a number in range
    _ = parts.port


def _check_base_url(base_url: str) -> None:
    scheme = urlsplit(base_url).scheme
    if not scheme or scheme not in uses_relative:
        raise ValueError(f"cannot resolve against base URL {base_url!r}")
    _check_url(base_url)


def resolve_specifier_map(specifier_map: Mapping[str, str], base_url: str) -> SpecifierMap:
    """Resolve every target of a specifier map against `base_url`.

    Absolute targets are returned unchanged. `base_url` must be an absolute
    URL of a scheme with paths, such as http(s) or file.

    Raises:
        ImportMapError: If a target is not a valid URL, or if `base_url`
            cannot be used to resolve it.
    """
    resolved: SpecifierMap = {}
    for specifier, target in specifier_map.items():
        try:
            _check_base_url(base_url)
            url = urljoin(base_url, target)
            _check_url(url)
        except ValueError as e:
            raise ImportMapError(specifier, target, str(e)) from e
        resolved[specifier] = url
    return resolved


def resolve_import_map(
    import_map: ImportMap | Mapping[str, Any], base_url: str
) -> ImportMap:
    """Resolve the relative targets of an import map against `base_url`.

    The imports and each scope are resolved independently. The given map is
    not modified.

    Raises:
        ImportMapError: If a target is not a valid URL.
        pydantic.ValidationError: If `import_map` is not a valid import map.
    """
    if not isinstance(import_map, ImportMap):
        import_map = ImportMap.model_validate(import_map)

    scopes = None
    if import_map.scopes is not None:
        scopes = {
            scope: resolve_specifier_map(specifiers, base_url)
            for scope, specifiers in import_map.scopes.items()
        }

    return ImportMap(
        imports=resolve_specifier_map(import_map.imports, base_url),
        scopes=scopes,
    )


def get_import_map(
    user_map: ImportMap | Mapping[str, Any] | None = None,
    url: str | None = None,
) -> ImportMap:
    """Return lume's import map, optionally merged with a user map.

    The user imports override lume's imports with the same specifier. The
    user scopes are used as they are.

    Args:
        user_map: Import map provided by the user.
        url: URL of the user map. Relative targets of the user map are
            resolved against it.

    Raises:
        ImportMapError: If a target is malformed, or `url` is relative or
            has no path to resolve against (`data:` URLs for example).
    """
    root = get_module_root()
    import_map = ImportMap(
        imports={
            "lume": urljoin(root, "__init__.py"),
            "lume/": root,
            REMOTE_ROOT: root,
        }
    )

    if user_map is None:
        return import_map

    if not isinstance(user_map, ImportMap):
        user_map = ImportMap.model_validate(user_map)
    if url:
        user_map = resolve_import_map(user_map, url)

    return ImportMap(
        imports={**import_map.imports, **user_map.imports},
        scopes=user_map.scopes,
    )


def to_url(location: str | Path) -> str:
    """Return `location` as a URL.

    URLs are returned as they are; paths are made absolute file URLs.
    """
    location = str(location)
    # A single letter scheme is a Windows drive
    if len(urlsplit(location).scheme) > 1:
        return location
    return Path(location).resolve().as_uri()


def load_import_map(
    location: str | Path, timeout: float = DEFAULT_TIMEOUT
) -> tuple[ImportMap, str]:
    """Load an import map from a path or a file/http(s) URL.

    `timeout` bounds the fetch of a remote map, in seconds.

    Returns:
        Tuple of (import_map, url_of_the_map).

    Raises:
        OSError: If a local file cannot be read.
        UnicodeDecodeError: If a local file is not UTF-8.
        httpx.HTTPError: If a remote map cannot be fetched.
        pydantic.ValidationError: If the content is not a valid import map.
    """
    url = to_url(location)
    parts = urlsplit(url)

    if parts.scheme in ("http", "https"):
        response = httpx.get(url, follow_redirects=True, timeout=timeout)
        response.raise_for_status()
        content = response.text
    elif parts.scheme == "file":
        content = Path(url2pathname(parts.path)).read_text(encoding="utf-8")
    else:
        raise OSError(f"Unsupported import map location: {url}")

    return ImportMap.model_validate_json(content), url


def write_import_map(import_map: ImportMap, path: Path) -> None:
    """Write an import map as pretty-printed JSON, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(import_map.to_json(), encoding="utf-8")


def update_import_map_file(file: Path, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """Create or update an import map file with lume's imports.

    If `file` holds a valid import map, its relative targets are resolved
    against the file location and it is merged with lume's map. Otherwise
    the file is (re)written with lume's map only.

    Returns:
        True if an existing map was updated, False if a new one was created.
    """
    try:
        user_map, url = load_import_map(file, timeout)
        import_map = get_import_map(user_map, url)
        updated = True
    except (
        OSError,
        UnicodeDecodeError,
        httpx.HTTPError,
        ValidationError,
        ImportMapError,
    ) as e:
        logger.info("Creating a new import map, cannot use %s: %s", file, e)
        import_map = get_import_map()
        updated = False

    write_import_map(import_map, file)
    return updated

"""Exceptions shared across lume."""


class LumeError(Exception):
    """Base exception for lume errors."""

    pass


class ImportMapError(LumeError):
    """Raised when an import map entry cannot be resolved to a URL."""

    def __init__(self, specifier: str, target: str, reason: str) -> None:
        self.specifier = specifier
        self.target = target
        super().__init__(
            f"Cannot resolve import map entry {specifier!r} -> {target!r}: {reason}"
        )


class UpgradeCheckError(LumeError):
    """Raised when a version endpoint returns an unexpected payload."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(f"Unexpected response from {url}: {reason}")

"""Upgrade notifications.

Once per interval (a day by default), compare the installed lume version
with the latest stable release, or with the latest commit for development
installs, and report when they differ.
"""

import json
import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from importlib import metadata
from pathlib import Path
from typing import Any

import httpx

from lume.config.settings import (
    DEFAULT_COMMITS_URL,
    DEFAULT_VERSIONS_URL,
    LumeSettings,
)
from lume.exceptions import UpgradeCheckError
from lume.storage import JsonFileStore, StateStore

logger = logging.getLogger(__name__)

DISTRIBUTION = "lume"
UPGRADE_CACHE_KEY = "lume-upgrade"
STABLE_COMMAND = "lume upgrade"
DEVELOPMENT_COMMAND = "lume upgrade --dev"

STABLE_VERSION = re.compile(r"^v\d+\.")


@dataclass(frozen=True)
class VersionInfo:
    """An available upgrade."""

    current: str
    latest: str
    command: str


def is_local_version(version: str) -> bool:
    """Return True for versions that are not a release or a commit."""
    return version.startswith("local ")


def is_stable_version(version: str) -> bool:
    """Return True for released versions such as ``v1.2.0``."""
    return STABLE_VERSION.match(version) is not None


def get_current_version(distribution: str = DISTRIBUTION) -> str:
    """Return the version of the running lume.

    - Installed from a package index: ``v<version>``.
    - Installed from git: the requested tag if it is a release, otherwise
      the installed commit hash.
    - Anything else (a source checkout, a local directory):
      ``local (<location>)``.
    """
    try:
        dist = metadata.distribution(distribution)
    except metadata.PackageNotFoundError:
        return f"local ({Path(__file__).resolve().parent})"

    direct_url = dist.read_text("direct_url.json")
    if direct_url is None:
        return f"v{dist.version}"

    info = json.loads(direct_url)
    vcs_info = info.get("vcs_info")
    if not vcs_info:
        return f"local ({info.get('url', dist.version)})"

    revision = vcs_info.get("requested_revision")
    if revision and is_stable_version(revision):
        return revision
    return vcs_info["commit_id"]


def _read_json(response: httpx.Response, url: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise UpgradeCheckError(url, "invalid JSON") from e


async def get_latest_version(
    client: httpx.AsyncClient, url: str = DEFAULT_VERSIONS_URL
) -> str:
    """Return the latest stable version from the versions endpoint."""
    response = await client.get(url)
    response.raise_for_status()
    data = _read_json(response, url)

    if not isinstance(data, dict) or not isinstance(data.get("latest"), str):
        raise UpgradeCheckError(url, 'expected {"latest": "<version>"}')
    return data["latest"]


async def get_latest_development_version(
    client: httpx.AsyncClient, url: str = DEFAULT_COMMITS_URL
) -> str:
    """Return the hash of the latest commit from the commits endpoint."""
    response = await client.get(url)
    response.raise_for_status()
    commits = _read_json(response, url)

    if (
        not isinstance(commits, list)
        or not commits
        or not isinstance(commits[0], dict)
        or not isinstance(commits[0].get("sha"), str)
    ):
        raise UpgradeCheckError(url, 'expected [{"sha": "<hash>"}, ...]')
    return commits[0]["sha"]


class UpgradeNotifier:
    """Decide whether the user should be told to upgrade.

    The time of the last check is persisted in `store`, so at most one
    network check happens per `interval`. The time is saved before the
    network call, so a failed check also waits for the next interval.
    """

    def __init__(
        self,
        store: StateStore,
        client: httpx.AsyncClient,
        *,
        current_version: str | None = None,
        versions_url: str = DEFAULT_VERSIONS_URL,
        commits_url: str = DEFAULT_COMMITS_URL,
        interval: timedelta = timedelta(days=1),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.client = client
        self.current_version = current_version
        self.versions_url = versions_url
        self.commits_url = commits_url
        self.interval = interval
        self.clock = clock

    def _last_checked(self) -> int | None:
        value = self.store.get(UPGRADE_CACHE_KEY)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            logger.debug("Ignoring invalid upgrade timestamp %r", value)
            return None

    async def check_for_upgrade(self) -> VersionInfo | None:
        """Return the available upgrade, or None.

        None is returned for local installs, when the last check is more
        recent than the interval, and when the installed version is the
        latest one.

        Raises:
            httpx.HTTPError: If the version lookup fails.
            UpgradeCheckError: If the endpoint returns an unexpected payload.
        """
        current = self.current_version or get_current_version()

        if is_local_version(current):
            logger.debug("Skipping upgrade check for %s", current)
            return None

        now = int(self.clock() * 1000)
        last_checked = self._last_checked()
        interval_ms = self.interval / timedelta(milliseconds=1)

        if last_checked is not None and now - last_checked < interval_ms:
            logger.debug("Upgrade checked recently, skipping")
            return None

        self.store.set(UPGRADE_CACHE_KEY, str(now))

        stable = is_stable_version(current)
        if stable:
            latest = await get_latest_version(self.client, self.versions_url)
        else:
            latest = await get_latest_development_version(self.client, self.commits_url)

        logger.debug("Current version %s, latest %s", current, latest)
        if current == latest:
            return None

        command = STABLE_COMMAND if stable else DEVELOPMENT_COMMAND
        return VersionInfo(current=current, latest=latest, command=command)


async def check_for_upgrade(
    settings: LumeSettings, store: StateStore | None = None
) -> VersionInfo | None:
    """Check for upgrades with the endpoints and timeouts from `settings`."""
    if store is None:
        store = JsonFileStore.default()

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        notifier = UpgradeNotifier(
            store,
            client,
            versions_url=settings.versions_url,
            commits_url=settings.commits_url,
            interval=settings.upgrade_interval,
        )
        return await notifier.check_for_upgrade()

"""Settings for lume.

Uses Pydantic v2 BaseSettings with custom source ordering for TOML config support.
"""

from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .sources import LumeTomlSettingsSource

if TYPE_CHECKING:
    from pydantic_settings.sources import PydanticBaseSettingsSource

DEFAULT_VERSIONS_URL = "https://cdn.deno.land/lume/meta/versions.json"
DEFAULT_COMMITS_URL = "https://api.github.com/repos/lumeland/lume/commits?per_page=1"

# Module-level state for passing context to settings_customise_sources
_project_dir: Path | None = None
_explicit_config: Path | None = None


def set_config_context(project_dir: Path, explicit_config: Path | None = None) -> None:
    """Set context for LumeSettings instantiation.

    This must be called before creating a LumeSettings instance to provide
    the project directory and optional explicit config file path for
    TOML config discovery.

    Args:
        project_dir: The project directory for config discovery.
        explicit_config: Explicit config file path (--config option).
    """
    global _project_dir, _explicit_config
    _project_dir = project_dir
    _explicit_config = explicit_config


def clear_config_context() -> None:
    """Clear the config context.

    This is primarily useful for testing to ensure a clean state.
    """
    global _project_dir, _explicit_config
    _project_dir = None
    _explicit_config = None


class LumeSettings(BaseSettings):
    """Settings for lume.

    Settings are loaded from multiple sources with the following priority
    (highest to lowest):
    1. Constructor kwargs (init_settings)
    2. Environment variables with LUME_ prefix (env_settings)
    3. TOML config files (merged from user/project/local configs)
    4. Field defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="LUME_",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown keys in TOML files
    )

    # Build
    concurrency_limit: int = Field(
        default=200,
        ge=1,
        description="Maximum number of items processed at the same time",
    )

    # Upgrade checks
    upgrade_check: bool = Field(
        default=True,
        description="Check for new lume releases",
    )

    upgrade_interval_hours: float = Field(
        default=24,
        gt=0,
        description="Minimum hours between two upgrade checks",
    )

    versions_url: str = Field(
        default=DEFAULT_VERSIONS_URL,
        description="Endpoint returning the latest stable version",
    )

    commits_url: str = Field(
        default=DEFAULT_COMMITS_URL,
        description="Endpoint returning the latest development commit",
    )

    http_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for network requests",
    )

    # Import maps
    import_map_file: str = Field(
        default="import_map.json",
        description="Import map file written by `lume import-map`",
    )

    @property
    def upgrade_interval(self) -> timedelta:
        return timedelta(hours=self.upgrade_interval_hours)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: "PydanticBaseSettingsSource",
        env_settings: "PydanticBaseSettingsSource",
        dotenv_settings: "PydanticBaseSettingsSource",
        file_secret_settings: "PydanticBaseSettingsSource",
    ) -> tuple["PydanticBaseSettingsSource", ...]:
        """Customize settings sources and their priority.

        Priority order (first = highest):
        1. init_settings - Constructor kwargs
        2. env_settings - LUME_* environment variables
        3. toml_source - Merged TOML config files
        """
        project_dir = _project_dir if _project_dir is not None else Path.cwd()

        toml_source = LumeTomlSettingsSource(
            settings_cls,
            project_dir=project_dir,
            explicit_config=_explicit_config,
        )

        return (init_settings, env_settings, toml_source)

"""Custom pydantic-settings source for lume's TOML configuration.

Plugs lume's layered TOML discovery into pydantic-settings'
`settings_customise_sources()`.
"""

from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic_settings.sources import InitSettingsSource

from .loader import load_all_configs


class LumeTomlSettingsSource(InitSettingsSource):
    """Settings source that loads from lume's TOML config hierarchy.

    Priority order (lowest to highest):
    1. User config (~/.config/lume/config.toml)
    2. Project base config (lume.toml or .lume/config.toml)
    3. Project local config (lume.local.toml or .lume/config.local.toml)

    When explicit_config is provided, ONLY that file is used (no discovery).
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        project_dir: Path,
        explicit_config: Path | None = None,
    ) -> None:
        self.project_dir = project_dir
        self.explicit_config = explicit_config

        toml_data, self.loaded_files = load_all_configs(project_dir, explicit_config)
        super().__init__(settings_cls, toml_data)

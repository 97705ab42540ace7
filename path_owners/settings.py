"""Configuration management using Pydantic Settings."""

import re

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from path_owners.label import LabelDefinition
from path_owners.refs import REFS_CONFIG, full_ref_name


class Settings(BaseSettings):
    """Owners settings from environment variables and config files."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PATH_OWNERS_",
        env_nested_delimiter="__",
        json_file=".env.json",
        json_file_encoding="utf-8",
        yaml_file=".env.yaml",
        yaml_file_encoding="utf-8",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            file_secret_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
            YamlConfigSettingsSource(settings_cls),
        )

    # Owners
    disabled_branches: list[str] = Field(
        default_factory=list,
        description="Regular expressions of branches (full ref names) without OWNERS processing",
    )
    expand_groups: bool = Field(
        default=True,
        description="Present owners as accounts rather than as written in OWNERS files",
    )
    label: str | None = Field(
        default=None,
        description="Global approval label 'Name[,Score]' overriding OWNERS files",
    )
    enable_submit_requirement: bool = Field(
        default=True,
        description="Evaluate the owners approval requirement",
    )
    all_projects: str = Field(
        default="All-Projects",
        description="Project holding the global OWNERS configuration",
    )
    all_users: str = Field(
        default="All-Users",
        description="Project holding user data, its ref updates are ignored",
    )
    config_ref: str = Field(
        default=REFS_CONFIG,
        description="Ref holding project level OWNERS files",
    )

    # Cache
    cache_max_size: int = Field(
        default=10000,
        description="Max cached OWNERS files. Set to 0 to disable the cache.",
    )
    cache_ttl: int = Field(
        default=60,
        description="Cached OWNERS files TTL in seconds",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format_json: bool = Field(
        default=True,
        description="Use JSON logging format (False for human-readable logs in development)",
    )
    log_exclude_loggers: str = Field(
        default="",
        description="Comma-separated list of logger names to exclude from DEBUG logging",
    )

    def is_branch_disabled(self, branch: str) -> bool:
        ref = full_ref_name(branch)
        return any(re.fullmatch(pattern, ref) for pattern in self.disabled_branches)

    @property
    def global_label(self) -> LabelDefinition | None:
        return LabelDefinition.parse(self.label)


settings = Settings()

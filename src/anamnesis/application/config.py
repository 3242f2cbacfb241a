from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from anamnesis.domain.constants import (
    DEFAULT_MAX_EASE,
    DEFAULT_MIN_EASE,
    DEFAULT_REVIEW_LIMIT,
)
from anamnesis.domain.errors import ConfigError
from anamnesis.domain.models import EaseBounds


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/anamnesis/config.toml",
        Path.home() / ".anamnesis.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for anamnesis.
    Supports loading from:
    1. Environment variables (ANAMNESIS_*)
    2. Config file (~/.config/anamnesis/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="ANAMNESIS_",
        extra="ignore",
    )

    # Scheduling
    min_ease: float = Field(default=DEFAULT_MIN_EASE, gt=0)
    max_ease: float = Field(default=DEFAULT_MAX_EASE, gt=0)

    # Storage
    progress_file: Path | None = None

    # Review queue
    review_limit: int = Field(default=DEFAULT_REVIEW_LIMIT, ge=1)
    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("progress_file", mode="before")
    @classmethod
    def resolve_progress_file(cls, v: Any) -> Path | None:
        if v is None:
            return None
        return Path(v).expanduser().resolve()

    @model_validator(mode="after")
    def check_ease_bounds(self) -> "AppConfig":
        if self.min_ease > self.max_ease:
            raise ValueError(
                f"min_ease ({self.min_ease}) must not exceed max_ease ({self.max_ease})"
            )
        return self

    def ease_bounds(self) -> EaseBounds:
        return EaseBounds(min_ease=self.min_ease, max_ease=self.max_ease)


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/anamnesis/config.toml (if exists)
    3. Environment variables (ANAMNESIS_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    try:
        return AppConfig(**overrides)
    except ValueError as e:
        raise ConfigError(str(e)) from e

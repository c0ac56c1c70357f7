from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from noteflash.domain.constants import (
    BLOCK_DUE,
    BLOCK_NEW,
    DEFAULT_NEW_CARDS_PER_DAY,
    LEARNING_STEPS,
    RELEARNING_STEPS,
    WARMUP_DUE,
    WARMUP_NEW,
)


def config_files() -> list[Path]:
    """Candidate config files, highest priority first."""
    return [
        Path.home() / ".config/noteflash/config.toml",
        Path.home() / ".noteflash.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for noteflash.
    Supports loading from:
    1. Environment variables (NOTEFLASH_*)
    2. Config file (~/.config/noteflash/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTEFLASH_",
        extra="ignore",
    )

    # Collection
    collection: Path = Field(default_factory=lambda: Path.cwd() / "cards.yaml")

    # Scheduling
    policy: Literal["strict", "simple"] = "strict"
    rating_scale: Literal["three", "four", "numeric"] = "three"
    learning_steps: list[float] = Field(default_factory=lambda: list(LEARNING_STEPS))
    relearning_steps: list[float] = Field(default_factory=lambda: list(RELEARNING_STEPS))

    # Session layout
    new_cards_per_day: int = Field(default=DEFAULT_NEW_CARDS_PER_DAY, ge=0)
    warmup_due: int = Field(default=WARMUP_DUE, ge=0)
    warmup_new: int = Field(default=WARMUP_NEW, ge=0)
    block_due: int = Field(default=BLOCK_DUE, ge=1)
    block_new: int = Field(default=BLOCK_NEW, ge=1)

    # Logging: 0 warnings only, 1 info, 2+ debug
    verbose: int = Field(default=1, ge=0)

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

        # Earlier sources take priority
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

    @field_validator("learning_steps", "relearning_steps")
    @classmethod
    def check_steps(cls, v: list[float]) -> list[float]:
        if not v:
            raise ValueError("step ladder must contain at least one step")
        if any(step <= 0 for step in v):
            raise ValueError("steps must be positive day fractions")
        return v

    @field_validator("collection", mode="before")
    @classmethod
    def resolve_collection(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    def session_layout(self) -> dict[str, int]:
        """Keyword arguments for build_session."""
        return {
            "warmup_due": self.warmup_due,
            "warmup_new": self.warmup_new,
            "block_due": self.block_due,
            "block_new": self.block_new,
        }


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/noteflash/config.toml (if exists)
    3. Environment variables (NOTEFLASH_*)
    4. cli_overrides (passed from Typer)
    """
    # Typer passes every option; only explicit values override lower layers.
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)

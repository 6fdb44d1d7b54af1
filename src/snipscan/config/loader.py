"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (SNIPSCAN__SECTION__KEY)
3. YAML config file, when a path is given
4. Built-in defaults (lowest priority)

The extraction core never calls this; callers load a config and pass
``config.extraction`` and a registry built from ``config.languages`` in.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from snipscan.config.models import LoggingConfig, SnipscanConfig
from snipscan.core.errors import ConfigError
from snipscan.snippets.models import ExtractionOptions, Language


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError.file_not_found(str(path))
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source (thread-safe)."""

    class SnipscanSettings(BaseSettings):
        """Root config. Env vars: SNIPSCAN__LOGGING__LEVEL, SNIPSCAN__EXTRACTION__..., etc."""

        model_config = SettingsConfigDict(
            env_prefix="SNIPSCAN__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        extraction: ExtractionOptions = ExtractionOptions()
        languages: list[Language] | None = None

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return SnipscanSettings


SnipscanSettings = _make_settings_class({})


def load_config(path: Path | str | None = None, **kwargs: Any) -> SnipscanConfig:
    """Load config: defaults < yaml file < env vars < kwargs.

    Args:
        path: Optional YAML file. A missing file is an error when given.
        **kwargs: Override values (highest precedence), e.g.
                  ``extraction={"transforms": ["full"]}``.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On a missing file, invalid YAML syntax or validation errors.
    """
    yaml_config = _load_yaml(Path(path).expanduser()) if path is not None else {}

    extraction = kwargs.get("extraction", yaml_config.get("extraction"))
    if isinstance(extraction, dict) and "transforms" in extraction and not extraction["transforms"]:
        raise ConfigError.no_transforms()

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
        return SnipscanConfig.model_validate(settings.model_dump())
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e

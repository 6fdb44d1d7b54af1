"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (SNIPSCAN__SECTION__KEY)
3. YAML file passed to load_config()
4. Built-in defaults (this file)

Environment Variable Format:
    SNIPSCAN__<SECTION>__<KEY>=<VALUE>

Examples:
    SNIPSCAN__LOGGING__LEVEL=DEBUG
    SNIPSCAN__EXTRACTION__HASH_ALGORITHM=sha_512
    SNIPSCAN__EXTRACTION__ON_REGION_ERROR=skip
    SNIPSCAN__LANGUAGES='["c"]'
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from snipscan.snippets.models import ExtractionOptions, Language

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        SNIPSCAN__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every located region and is verbose.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class SnipscanConfig(BaseModel):
    """Root configuration for snipscan.

    All settings can be configured via:
    1. Environment variables: SNIPSCAN__SECTION__KEY
    2. A YAML config file
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    extraction: ExtractionOptions = Field(default_factory=ExtractionOptions)
    languages: list[Language] | None = Field(
        default=None,
        description="Enabled language capabilities. None enables every installed grammar.",
    )

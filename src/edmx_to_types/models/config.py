"""Configuration models for the resolution engine and the renderer."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class QualificationMode(str, Enum):
    """When rendered type names get their namespace alias prefixed."""

    AUTO = "auto"  # only names declared in 2+ namespaces
    ALWAYS = "always"
    NEVER = "never"


class DecimalEncoding(str, Enum):
    """How ``Edm.Decimal`` values are represented in generated code."""

    NATIVE = "native"
    STRING = "string"


class OutputFlavor(str, Enum):
    """Shape of the generated Python declarations."""

    DATACLASS = "dataclass"
    PYDANTIC = "pydantic"


class GeneratorConfig(BaseModel):
    """Options consumed by the resolution engine.

    Example:
    -------
        ```yaml
        qualification_mode: auto
        decimal_encoding: string
        ```

    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    qualification_mode: Annotated[
        QualificationMode,
        Field(
            default=QualificationMode.AUTO,
            description="Namespace prefixing policy for rendered type names",
        ),
    ]
    decimal_encoding: Annotated[
        DecimalEncoding,
        Field(
            default=DecimalEncoding.NATIVE,
            description="Native decimal type or opaque string for Edm.Decimal",
        ),
    ]


class RenderOptions(BaseModel):
    """Options consumed by the Python renderer only."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    flavor: OutputFlavor = OutputFlavor.DATACLASS
    split: Annotated[
        bool,
        Field(default=False, description="Emit one module per declaration"),
    ]
    package_name: Annotated[
        str,
        Field(
            default="models",
            pattern=r"^[a-zA-Z_][a-zA-Z0-9_]*$",
            description="Python package name used for split output",
        ),
    ]


class ToolConfig(BaseModel):
    """Root of an ``edmx-to-types`` configuration file.

    Example:
    -------
        ```yaml
        generator:
          qualification_mode: always
        render:
          flavor: pydantic
          split: true
        ```

    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    render: RenderOptions = Field(default_factory=RenderOptions)


class ConfigError(Exception):
    """Raised when a configuration file or option is invalid."""

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        """Initialize ConfigError.

        Args:
        ----
            message: Summary of what went wrong.
            problems: Individual problems, one per invalid option.

        """
        self.problems = problems or []
        details = "".join(f"\n  - {p}" for p in self.problems)
        super().__init__(f"{message}{details}")


def parse_config(data: dict[str, Any], source: str = "configuration") -> ToolConfig:
    """Validate raw configuration data.

    Args:
    ----
        data: Parsed configuration mapping.
        source: Description of where the data came from, for error messages.

    Returns:
    -------
        Validated ToolConfig.

    Raises:
    ------
        ConfigError: If any option is unknown or has an unrecognized value.

    """
    try:
        return ToolConfig.model_validate(data)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            problems.append(f"{loc}: {error['msg']}")
        raise ConfigError(f"Invalid {source}", problems) from e


def load_config(path: Path) -> ToolConfig:
    """Load and validate a YAML configuration file.

    Args:
    ----
        path: Path to the configuration file.

    Returns:
    -------
        Validated ToolConfig. An empty file yields the defaults.

    Raises:
    ------
        ConfigError: If the file cannot be read or is invalid.

    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid configuration file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

    if data is None:
        return ToolConfig()

    if not isinstance(data, dict):
        raise ConfigError(
            f"Invalid configuration file {path}: expected a mapping, got {type(data).__name__}"
        )

    return parse_config(data, source=f"configuration file {path}")

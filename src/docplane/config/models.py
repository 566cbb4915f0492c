"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (DOCPLANE__SECTION__KEY)
3. Project YAML (.docplane/config.yaml)
4. Global YAML (~/.config/docplane/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    DOCPLANE__<SECTION>__<KEY>=<VALUE>

Examples:
    DOCPLANE__LOGGING__LEVEL=DEBUG
    DOCPLANE__COMMENTS__COMMENT_STYLE=block
    DOCPLANE__CONVERTER__EXCLUDE_EXTERNALS=true
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
CommentStyle = Literal["jsdoc", "block", "line", "all"]


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
        DOCPLANE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every created reflection.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


def _default_block_tags() -> list[str]:
    return [
        "@param",
        "@returns",
        "@remarks",
        "@example",
        "@deprecated",
        "@see",
        "@throws",
        "@typeParam",
        "@defaultValue",
        "@module",
        "@category",
        "@group",
        "@since",
    ]


def _default_modifier_tags() -> list[str]:
    return [
        "@internal",
        "@hidden",
        "@alpha",
        "@beta",
        "@experimental",
        "@public",
        "@readonly",
        "@event",
        "@override",
        "@virtual",
        "@packageDocumentation",
    ]


class CommentConfig(BaseModel):
    """Documentation comment discovery and parsing.

    Env vars:
        DOCPLANE__COMMENTS__COMMENT_STYLE: jsdoc, block, line or all
    """

    comment_style: CommentStyle = Field(
        default="jsdoc",
        description="Which source comments count as documentation. "
        "jsdoc: /** */ only. block: any /* */. line: // runs. all: any of these.",
    )
    block_tags: list[str] = Field(
        default_factory=_default_block_tags,
        description="Tags that open a block section. Unknown block tags are kept but logged.",
    )
    modifier_tags: list[str] = Field(
        default_factory=_default_modifier_tags,
        description="Flag-like tags with no content.",
    )

    @field_validator("block_tags", "modifier_tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        for tag in v:
            if not tag.startswith("@") or len(tag) < 2:
                raise ValueError(f"Tag must start with '@': {tag}")
        return v


class ConverterConfig(BaseModel):
    """Conversion policy.

    Env vars:
        DOCPLANE__CONVERTER__PROJECT_NAME: Name of the root reflection
        DOCPLANE__CONVERTER__EXCLUDE_EXTERNALS: Skip bindings declared in external files
        DOCPLANE__CONVERTER__USE_LINK_RESOLUTION: Bind {@link} targets while parsing comments
    """

    project_name: str = Field(
        default="Documentation",
        description="Display name of the project reflection.",
    )
    external_patterns: list[str] = Field(
        default_factory=lambda: ["**/node_modules/**"],
        description="Glob patterns over declaration file names. "
        "Bindings declared in a matching file are flagged external.",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns over declaration file names. "
        "Bindings declared in a matching file are not converted.",
    )
    exclude_externals: bool = Field(
        default=False,
        description="Do not convert bindings classified as external.",
    )
    use_link_resolution: bool = Field(
        default=True,
        description="Pass the active resolver to comment parsing so {@link} targets are bound. "
        "TRADEOFF: Slightly slower comment parsing.",
    )


class DocPlaneConfig(BaseModel):
    """Root configuration for DocPlane.

    All settings can be configured via:
    1. Environment variables: DOCPLANE__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    comments: CommentConfig = Field(default_factory=CommentConfig)
    converter: ConverterConfig = Field(default_factory=ConverterConfig)

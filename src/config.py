"""Unified configuration loaded from .quire.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from quire.content.compiler import DEFAULT_EXTENSIONS
from quire.content.models import LoadMode

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".quire.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]


class ContentSectionConfig(BaseModel):
    """[content] section."""

    directory: str = "./content"
    type: str = "post"
    mode: LoadMode = LoadMode.SLIM


class CompilerSectionConfig(BaseModel):
    """[compiler] section."""

    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    extension_configs: dict[str, dict[str, Any]] = Field(default_factory=dict)
    check_jsx: bool = True


class TagsSectionConfig(BaseModel):
    """[tags] section."""

    registry_file: str = ""


class QuireConfig(BaseModel):
    """Top-level configuration model."""

    content: ContentSectionConfig = Field(default_factory=ContentSectionConfig)
    compiler: CompilerSectionConfig = Field(default_factory=CompilerSectionConfig)
    tags: TagsSectionConfig = Field(default_factory=TagsSectionConfig)

    def to_compiler(self) -> object:
        """Build the MdxCompiler described by the [compiler] section."""
        from quire.content.compiler import MdxCompiler

        return MdxCompiler(
            extensions=list(self.compiler.extensions),
            extension_configs=dict(self.compiler.extension_configs),
            check_jsx=self.compiler.check_jsx,
        )

    def to_tag_registry(self) -> object | None:
        """Load the tag registry named in [tags], or None when unset."""
        from quire.content.tags import TagRegistry

        if not self.tags.registry_file:
            return None
        return TagRegistry.from_file(self.tags.registry_file)


def load_config(path: str | Path | None = None) -> QuireConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .quire.toml in CWD
    3. ~/.config/quire/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged QuireConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        global_config = Path.home() / ".config" / "quire" / "config.toml"
        if not data and global_config.exists():
            data = _load_toml(global_config)
            logger.info("Loaded config from %s", global_config)

    config = QuireConfig()
    if data:
        try:
            config = QuireConfig.model_validate(data)
        except ValidationError as exc:
            logger.warning("Invalid configuration, using defaults: %s", exc)

    return _apply_env_vars(config)


def merge_cli_overrides(config: QuireConfig, **cli_kwargs: object) -> QuireConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``content_directory``,
            ``content_type``, ``mode``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "content_directory": ("content", "directory"),
        "content_type": ("content", "type"),
        "mode": ("content", "mode"),
        "tag_registry": ("tags", "registry_file"),
        "extensions": ("compiler", "extensions"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return QuireConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: QuireConfig) -> QuireConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "QUIRE_CONTENT_DIR": ("content", "directory"),
        "QUIRE_CONTENT_TYPE": ("content", "type"),
        "QUIRE_MODE": ("content", "mode"),
        "QUIRE_TAG_REGISTRY": ("tags", "registry_file"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    extensions_raw = os.environ.get("QUIRE_MARKDOWN_EXTENSIONS")
    if extensions_raw is not None:
        data["compiler"]["extensions"] = [
            e.strip() for e in extensions_raw.split(",") if e.strip()
        ]

    try:
        return QuireConfig.model_validate(data)
    except ValidationError as exc:
        logger.warning("Invalid QUIRE_* environment override, ignoring: %s", exc)
        return config

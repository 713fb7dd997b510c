# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and loaders for diagtree."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError, MalformedDiagnostic
from .models import SignDefinition
from .projector import DEFAULT_INDEX_FILENAMES, Projector
from .severity import Severity, coerce_severity

LOGGER = logging.getLogger(__name__)

CONFIG_FILENAME: Final[str] = "diagtree.toml"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "diagtree"


class IconConfig(BaseModel):
    """Toggle glyphs drawn in front of file groups."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    opened: str = "▾"
    closed: str = "▸"


class DiagtreeConfig(BaseModel):
    """Presentation and refresh settings.

    Attributes:
        title: Panel header, an empty string hides it.
        icons: Toggle glyphs.
        index_filenames: File names shown as ``parent/name``.
        signs: Host-registered glyphs keyed by severity name.
        working_root: Root display paths are made relative to.
        deferred_refresh: Queue change notifications until the host drains them.
        poll_interval: Seconds between source polls in watch mode.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str = "DIAGNOSTICS"
    icons: IconConfig = Field(default_factory=IconConfig)
    index_filenames: tuple[str, ...] = DEFAULT_INDEX_FILENAMES
    signs: dict[Severity, SignDefinition] = Field(default_factory=dict)
    working_root: Path | None = None
    deferred_refresh: bool = False
    poll_interval: float = Field(default=0.5, gt=0)

    @field_validator("signs", mode="before")
    @classmethod
    def _coerce_sign_keys(cls, value: Any) -> Any:
        """Accept severity names or numbers as ``signs`` keys.

        Args:
            value: Raw ``signs`` table.

        Returns:
            Any: Table keyed by :class:`Severity` when ``value`` is a mapping.
        """

        if not isinstance(value, Mapping):
            return value
        coerced: dict[Severity, Any] = {}
        for key, sign in value.items():
            try:
                coerced[coerce_severity(key)] = sign
            except MalformedDiagnostic as exc:
                raise ValueError(f"unknown severity {key!r} in signs") from exc
        return coerced

    def projector(self) -> Projector:
        """Return a :class:`Projector` configured from these settings."""

        return Projector(
            opened_icon=self.icons.opened,
            closed_icon=self.icons.closed,
            title=self.title,
            index_filenames=self.index_filenames,
        )


def _read_toml(path: Path) -> dict[str, Any]:
    """Load ``path`` as TOML.

    Args:
        path: TOML document.

    Returns:
        dict[str, Any]: Parsed document.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc


def _section(root: Path) -> tuple[Path | None, Mapping[str, Any]]:
    """Return the diagtree settings found under ``root``.

    ``diagtree.toml`` wins over the ``[tool.diagtree]`` table of ``pyproject.toml``.

    Args:
        root: Project root searched for configuration files.

    Returns:
        tuple[Path | None, Mapping[str, Any]]: File the settings came from, or
        ``None`` when only defaults apply, and the raw settings.
    """

    standalone = root / CONFIG_FILENAME
    if standalone.is_file():
        return standalone, _read_toml(standalone)
    pyproject = root / PYPROJECT_FILENAME
    if pyproject.is_file():
        tool_section = _read_toml(pyproject).get(PYPROJECT_TOOL_KEY)
        if isinstance(tool_section, Mapping):
            section = tool_section.get(PYPROJECT_SECTION_KEY)
            if isinstance(section, Mapping):
                return pyproject, section
    return None, {}


def load_config(root: Path, overrides: Mapping[str, Any] | None = None) -> DiagtreeConfig:
    """Load configuration for ``root``.

    ``diagtree.toml`` takes precedence over ``[tool.diagtree]`` in
    ``pyproject.toml``. ``overrides`` (typically CLI options) win over both;
    ``None`` values in ``overrides`` are ignored.

    Args:
        root: Project directory searched for configuration files.
        overrides: Values applied on top of the file configuration.

    Returns:
        DiagtreeConfig: Validated configuration.

    Raises:
        ConfigError: If a file cannot be parsed or a value is invalid.
    """

    source, section = _section(root)
    payload: dict[str, Any] = dict(section)
    payload.update({key: value for key, value in (overrides or {}).items() if value is not None})
    if payload.get("working_root") is not None:
        working_root = Path(payload["working_root"]).expanduser()
        payload["working_root"] = working_root if working_root.is_absolute() else root / working_root
    try:
        config = DiagtreeConfig.model_validate(payload)
    except ValidationError as exc:
        origin = source or "overrides"
        raise ConfigError(f"Invalid diagtree configuration ({origin}): {exc}") from exc
    LOGGER.debug("configuration loaded from %s", source or "defaults")
    return config


__all__ = ["CONFIG_FILENAME", "DiagtreeConfig", "IconConfig", "load_config"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reasoning about filesystem paths."""

from __future__ import annotations

from functools import lru_cache
from os import PathLike
from pathlib import Path
from typing import Final

_Pathish = str | PathLike[str] | Path
_DEFAULT_CACHE_SIZE: Final[int] = 1024


@lru_cache(maxsize=_DEFAULT_CACHE_SIZE)
def _best_effort_resolve(path: Path) -> Path:
    """Return ``path`` resolved where possible without raising.

    Args:
        path: Candidate path to resolve.

    Returns:
        Path: Absolute variant when resolution succeeds; otherwise the closest
        achievable approximation.
    """

    try:
        return path.resolve(strict=False)
    except (OSError, RuntimeError):
        return path.absolute() if not path.is_absolute() else path


def absolute_path(path: _Pathish, *, base_dir: _Pathish | None = None) -> Path:
    """Return ``path`` as an absolute path, joining relative input onto ``base_dir``.

    Args:
        path: Filesystem path supplied by the caller.
        base_dir: Directory relative paths are anchored to. Defaults to ``Path.cwd()``.

    Returns:
        Path: Resolved absolute path.
    """

    raw_path = Path(path).expanduser()
    base = _best_effort_resolve(Path.cwd() if base_dir is None else Path(base_dir).expanduser())
    return _best_effort_resolve(raw_path if raw_path.is_absolute() else base / raw_path)


def make_relative(path: _Pathish, *, base_dir: _Pathish | None = None) -> Path:
    """Return ``path`` relative to ``base_dir`` when it lives below it.

    Args:
        path: Filesystem path supplied by the caller.
        base_dir: Working root. Defaults to ``Path.cwd()`` when omitted.

    Returns:
        Path: Relative path when ``path`` is inside ``base_dir``, otherwise the
        resolved absolute path.
    """

    if path is None:
        raise ValueError("path must not be None")
    candidate = absolute_path(path, base_dir=base_dir)
    base = _best_effort_resolve(Path.cwd() if base_dir is None else Path(base_dir).expanduser())
    try:
        return candidate.relative_to(base)
    except ValueError:
        return candidate


__all__ = ["absolute_path", "make_relative"]

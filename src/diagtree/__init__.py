# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic aggregation and tree reconciliation engine."""

from __future__ import annotations

from .errors import AdapterUnavailable, ConfigError, DiagtreeError, MalformedDiagnostic, SessionStateError
from .models import NormalizedDiagnostic, RawDiagnostic, SignDefinition
from .normalizer import NormalizationResult, normalize
from .projector import Projector, display_file_path
from .session import SessionState, ViewSession
from .severity import Severity
from .tree import (
    DiagnosticNode,
    ExpansionSnapshot,
    GroupNode,
    Tree,
    build_tree,
    capture_expansion,
    is_leaf,
    reconcile,
    toggle_expansion,
)

__all__ = [
    "AdapterUnavailable",
    "ConfigError",
    "DiagnosticNode",
    "DiagtreeError",
    "ExpansionSnapshot",
    "GroupNode",
    "MalformedDiagnostic",
    "NormalizationResult",
    "NormalizedDiagnostic",
    "Projector",
    "RawDiagnostic",
    "SessionState",
    "SessionStateError",
    "Severity",
    "SignDefinition",
    "Tree",
    "ViewSession",
    "build_tree",
    "capture_expansion",
    "display_file_path",
    "is_leaf",
    "normalize",
    "reconcile",
    "toggle_expansion",
]

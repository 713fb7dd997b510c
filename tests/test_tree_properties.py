# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Property tests for tree ordering and reconciliation."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from diagtree.models import RawDiagnostic
from diagtree.normalizer import normalize
from diagtree.tree import ExpansionSnapshot, build_tree, capture_expansion, reconcile
from tests.helpers.fakes import host_for, raw

FILES = ("a.lua", "b/c.lua", "b/init.lua", "z.py", "src/pkg/__init__.py")

s_raw = st.builds(
    raw,
    bufnr=st.integers(min_value=1, max_value=len(FILES) + 2),
    lnum=st.integers(min_value=0, max_value=50),
    col=st.integers(min_value=0, max_value=10),
    severity=st.integers(min_value=1, max_value=4),
)
s_batch = st.lists(s_raw, max_size=40)
s_keys = st.sets(st.sampled_from([f"bufnr:{index}" for index in range(1, len(FILES) + 2)]))


def _build(records: list[RawDiagnostic]):
    return build_tree(normalize(records, host_for(*FILES)).diagnostics)


@settings(max_examples=75, deadline=None)
@given(records=s_batch)
def test_groups_and_leaves_are_strictly_ordered(records: list[RawDiagnostic]) -> None:
    tree = _build(records)

    paths = [group.display_path for group in tree]
    assert paths == sorted(paths)
    assert len(set(paths)) == len(paths)
    for group in tree:
        assert group.children
        positions = [(leaf.diagnostic.line, leaf.diagnostic.column) for leaf in group.children]
        assert positions == sorted(positions)
        assert len(set(positions)) == len(positions)


@settings(max_examples=75, deadline=None)
@given(records=s_batch, keys=s_keys)
def test_reconcile_is_positional_independent_and_idempotent(records: list[RawDiagnostic], keys: set[str]) -> None:
    snapshot = ExpansionSnapshot.of(*keys)
    tree = _build(records)

    reconcile(snapshot, tree)
    expanded_once = {group.group_key for group in tree if group.expanded}
    reconcile(snapshot, tree)

    assert {group.group_key for group in tree if group.expanded} == expanded_once
    assert expanded_once == keys & {group.group_key for group in tree}
    assert capture_expansion(tree).group_keys == expanded_once


@settings(max_examples=50, deadline=None)
@given(before=s_batch, after=s_batch)
def test_files_without_diagnostics_have_no_group(before: list[RawDiagnostic], after: list[RawDiagnostic]) -> None:
    old = _build(before)
    for group in old:
        group.expanded = True

    new = reconcile(capture_expansion(old), _build(after))

    assert {group.group_key for group in new} == {f"bufnr:{record.bufnr}" for record in after}

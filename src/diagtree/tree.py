# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Grouped diagnostic tree, expansion snapshots and reconciliation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from .models import NormalizedDiagnostic

KeyPath = tuple[str, ...]


@dataclass(slots=True)
class DiagnosticNode:
    """Leaf node wrapping one normalised diagnostic."""

    diagnostic: NormalizedDiagnostic
    expanded: bool = False

    @property
    def key(self) -> str:
        """Return the node identity, unique within its group."""

        return self.diagnostic.node_key

    @property
    def children(self) -> Sequence[TreeNode]:
        """Return no children; diagnostics are leaves."""

        return ()


@dataclass(slots=True)
class GroupNode:
    """Node representing one file and its diagnostics.

    Attributes:
        group_key: Identity of the file.
        display_path: Path shown for the file.
        children: Diagnostics ordered by ``(line, column)``.
        expanded: Visual state, the only attribute reconciliation touches.
    """

    group_key: str
    display_path: str
    children: list[DiagnosticNode] = field(default_factory=list)
    expanded: bool = False

    @property
    def key(self) -> str:
        """Return the group identity."""

        return self.group_key


TreeNode = GroupNode | DiagnosticNode


@dataclass(slots=True)
class Tree:
    """Root of the diagnostic tree holding groups in display order."""

    groups: list[GroupNode] = field(default_factory=list)

    def __iter__(self) -> Iterator[GroupNode]:
        """Iterate over groups in display order."""

        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)

    def get(self, group_key: str) -> GroupNode | None:
        """Return the group identified by ``group_key`` when present."""

        for group in self.groups:
            if group.group_key == group_key:
                return group
        return None


@dataclass(frozen=True, slots=True)
class ExpansionSnapshot:
    """Identity paths of the nodes that were expanded when the snapshot was taken.

    A group is identified by the one-element path ``(group_key,)``; deeper
    levels append their own keys.
    """

    paths: frozenset[KeyPath] = frozenset()

    @classmethod
    def of(cls, *group_keys: str) -> ExpansionSnapshot:
        """Return a snapshot marking the given groups as expanded."""

        return cls(frozenset((key,) for key in group_keys))

    def __contains__(self, path: object) -> bool:
        """Return whether ``path`` (a group key or identity path) was expanded."""

        if isinstance(path, str):
            path = (path,)
        return path in self.paths

    def __len__(self) -> int:
        return len(self.paths)

    @property
    def group_keys(self) -> frozenset[str]:
        """Return the identities of expanded top-level groups."""

        return frozenset(path[0] for path in self.paths if len(path) == 1)


def _sort_key(diagnostic: NormalizedDiagnostic) -> tuple[str, int, int]:
    return diagnostic.display_path, diagnostic.line, diagnostic.column


def build_tree(normalized: Iterable[NormalizedDiagnostic]) -> Tree:
    """Group diagnostics by file into an ordered two-level tree.

    One stable sort over ``(display_path, line, column)`` yields both the group
    order and the order of leaves inside each group.

    Args:
        normalized: Normalised diagnostics in any order.

    Returns:
        Tree: Tree whose groups are all collapsed.
    """

    groups: dict[str, GroupNode] = {}
    for diagnostic in sorted(normalized, key=_sort_key):
        group = groups.get(diagnostic.group_key)
        if group is None:
            group = GroupNode(group_key=diagnostic.group_key, display_path=diagnostic.display_path)
            groups[diagnostic.group_key] = group
        group.children.append(DiagnosticNode(diagnostic))
    return Tree(list(groups.values()))


def _walk(nodes: Iterable[TreeNode], prefix: KeyPath) -> Iterator[tuple[KeyPath, TreeNode]]:
    for node in nodes:
        path = (*prefix, node.key)
        yield path, node
        yield from _walk(node.children, path)


def capture_expansion(tree: Tree) -> ExpansionSnapshot:
    """Return the identity paths of every expanded node in ``tree``."""

    return ExpansionSnapshot(frozenset(path for path, node in _walk(tree.groups, ()) if node.expanded))


def reconcile(previous_expansion: ExpansionSnapshot, new_tree: Tree) -> Tree:
    """Carry expansion state onto ``new_tree`` by node identity.

    Nodes whose identity path appears in ``previous_expansion`` are expanded,
    all other nodes are collapsed. Identities with no matching node are ignored.
    Only the expanded flags are modified.

    Args:
        previous_expansion: Snapshot captured from the tree being replaced.
        new_tree: Freshly built tree.

    Returns:
        Tree: ``new_tree`` with expansion applied.
    """

    for path, node in _walk(new_tree.groups, ()):
        node.expanded = bool(node.children) and path in previous_expansion.paths
    return new_tree


def is_leaf(node: TreeNode) -> bool:
    """Return ``True`` when ``node`` has no children."""

    return not node.children


def toggle_expansion(node: TreeNode) -> bool:
    """Flip the expanded state of ``node``.

    Returns:
        bool: ``True`` when the state changed, ``False`` for leaves.
    """

    if is_leaf(node):
        return False
    node.expanded = not node.expanded
    return True


def iter_visible(tree: Tree) -> Iterator[tuple[TreeNode, int]]:
    """Yield visible nodes depth-first with their one-based depth."""

    def visit(nodes: Iterable[TreeNode], depth: int) -> Iterator[tuple[TreeNode, int]]:
        for node in nodes:
            yield node, depth
            if node.expanded:
                yield from visit(node.children, depth + 1)

    yield from visit(tree.groups, 1)


__all__ = [
    "DiagnosticNode",
    "ExpansionSnapshot",
    "GroupNode",
    "KeyPath",
    "Tree",
    "TreeNode",
    "build_tree",
    "capture_expansion",
    "is_leaf",
    "iter_visible",
    "reconcile",
    "toggle_expansion",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Project tree nodes onto styled display lines."""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass
from pathlib import PurePath
from typing import Final

from rich.text import Text

from .tree import GroupNode, Tree, TreeNode, iter_visible

DEFAULT_INDEX_FILENAMES: Final[tuple[str, ...]] = ("init.lua", "__init__.py", "index.js", "index.ts", "mod.rs")
TITLE_STYLE: Final[str] = "diagnostic.title"
_CURRENT_DIR: Final[str] = "."

PathShortener = Callable[[str], str]


def display_file_path(path: str, index_filenames: Collection[str] = DEFAULT_INDEX_FILENAMES) -> str:
    """Return the short label shown for a file group.

    The label is the file name followed by ``" - "`` and its directory. Index
    files such as ``init.lua`` are shown as ``parent/init.lua`` with the
    directory taken one level higher. The directory is omitted when it is the
    current directory.

    Args:
        path: Display path of the group.
        index_filenames: File names treated as package index files.

    Returns:
        str: Shortened label.
    """

    pure = PurePath(path)
    file_name = pure.name or path
    directory = pure.parent
    if file_name in index_filenames and directory.name:
        file_name = f"{directory.name}/{file_name}"
        directory = directory.parent
    location = str(directory)
    if location == _CURRENT_DIR:
        return file_name
    return f"{file_name} - {location}"


@dataclass(frozen=True, slots=True)
class RenderedPanel:
    """Lines drawn for one render along with the node behind each row.

    Attributes:
        lines: Header lines followed by one line per visible node.
        nodes: Node for each row of ``lines``, ``None`` for header rows.
    """

    lines: tuple[Text, ...]
    nodes: tuple[TreeNode | None, ...]

    def node_at(self, row: int) -> TreeNode | None:
        """Return the node rendered on zero-based ``row``, if any."""

        if 0 <= row < len(self.nodes):
            return self.nodes[row]
        return None

    @property
    def plain(self) -> list[str]:
        """Return the lines without styling."""

        return [line.plain for line in self.lines]


@dataclass(slots=True)
class Projector:
    """Render tree nodes as rich :class:`~rich.text.Text` lines.

    Attributes:
        opened_icon: Toggle glyph for expanded groups.
        closed_icon: Toggle glyph for collapsed groups.
        title: Header shown above the tree, omitted when empty.
        index_filenames: File names shortened to ``parent/name``.
        shorten_path: Host override for group labels.
    """

    opened_icon: str = "▾"
    closed_icon: str = "▸"
    title: str = "DIAGNOSTICS"
    index_filenames: tuple[str, ...] = DEFAULT_INDEX_FILENAMES
    shorten_path: PathShortener | None = None

    def group_label(self, group: GroupNode) -> str:
        """Return the label shown for ``group``.

        Args:
            group: File group being projected.

        Returns:
            str: Shortened path when a shortener is configured, otherwise the
            display path with the index-file rule applied.
        """

        if self.shorten_path is not None:
            return self.shorten_path(group.display_path)
        return display_file_path(group.display_path, self.index_filenames)

    def project(self, node: TreeNode, depth: int = 1) -> Text:
        """Return the display line for ``node`` at ``depth`` (one-based).

        Args:
            node: Group or diagnostic node.
            depth: Tree depth controlling indentation.

        Returns:
            Text: Styled line.
        """

        line = Text(" " * (depth - 1))
        if isinstance(node, GroupNode):
            line.append(self.opened_icon if node.expanded else self.closed_icon)
            line.append(" ")
            line.append(self.group_label(node))
            return line
        diagnostic = node.diagnostic
        line.append(diagnostic.sign_glyph, style=diagnostic.sign_style)
        line.append(" ".join(diagnostic.message.splitlines()))
        line.append(f" [{diagnostic.line}, {diagnostic.column}]")
        return line

    def header(self) -> list[Text]:
        """Return the title row and its blank spacer, or nothing without a title."""

        if not self.title:
            return []
        return [Text(self.title, style=TITLE_STYLE), Text()]

    def render(self, tree: Tree) -> RenderedPanel:
        """Render the header and every visible node of ``tree``."""

        lines: list[Text] = self.header()
        nodes: list[TreeNode | None] = [None] * len(lines)
        for node, depth in iter_visible(tree):
            lines.append(self.project(node, depth))
            nodes.append(node)
        return RenderedPanel(tuple(lines), tuple(nodes))


__all__ = [
    "DEFAULT_INDEX_FILENAMES",
    "PathShortener",
    "Projector",
    "RenderedPanel",
    "TITLE_STYLE",
    "display_file_path",
]

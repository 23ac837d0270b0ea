"""
Repository Tree Walker

This module walks a checked-out repository once and derives three views from that
single traversal: a nested tree of file/directory entries, an indented text
rendering in the style of the ``tree`` command, and a Mermaid graph description
of the folder hierarchy.
"""

import os
import re
import stat
import logging
from typing import Dict, FrozenSet, Iterable, Iterator, List, NamedTuple, Optional, Tuple

from repolens.analysis.errors import WalkFailure
from repolens.core.settings import DEFAULT_EXCLUSIONS, EntryOrder, ErrorPolicy
from repolens.models.analysis import GraphDescription, RepositoryStructure
from repolens.models.core import FileSystemEntry
from repolens.utils.paths import is_within

logger = logging.getLogger(__name__)

BRANCH_GLYPH = "├──"
TERMINAL_GLYPH = "└──"
BRANCH_INDENT = "│   "
TERMINAL_INDENT = "    "
DIRECTORY_ICON = "📁"
FILE_ICON = "📄"

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_.]")
_LINE_BREAKS = re.compile(r"[\r\n]")

# Mermaid flowchart keywords that cannot be used as bare node ids
MERMAID_KEYWORDS = frozenset(
    {
        "end",
        "graph",
        "flowchart",
        "subgraph",
        "direction",
        "style",
        "class",
        "classdef",
        "click",
        "linkstyle",
        "call",
        "href",
        "default",
    }
)
KEYWORD_PREFIX = "n_"


class WalkStep(NamedTuple):
    """One entry visited by :func:`iter_entries`."""

    name: str
    full_path: str
    relative_path: str
    is_dir: bool
    depth: int
    is_last: bool
    parent: Optional[str]


def sanitize_node_id(relative_path: str) -> str:
    """
    Turn a relative path into a Mermaid-safe node id.

    Everything except ASCII letters, digits, underscores and dots becomes an
    underscore, so separators, whitespace, hyphens and brackets all collapse the
    same way. Ids that spell a Mermaid keyword (``end``) get a ``n_`` prefix.
    """
    node_id = _UNSAFE_ID_CHARS.sub("_", relative_path)
    if node_id.lower() in MERMAID_KEYWORDS:
        node_id = f"{KEYWORD_PREFIX}{node_id}"
    return node_id


def display_name(name: str) -> str:
    """Entry name with line breaks flattened, so one entry is always one line."""
    return _LINE_BREAKS.sub(" ", name)


class NodeIdRegistry:
    """
    Hands out graph node ids for relative paths.

    Ids start from :func:`sanitize_node_id`; when two different paths sanitize to
    the same id (``a-b`` and ``a_b``) the later one gets a numeric suffix. The
    mapping back to the real path is kept so the graph can be annotated.
    """

    def __init__(self) -> None:
        self._ids: Dict[str, str] = {}
        self._paths: Dict[str, str] = {}

    def id_for(self, relative_path: str) -> str:
        if relative_path in self._ids:
            return self._ids[relative_path]

        base = sanitize_node_id(relative_path)
        candidate = base
        suffix = 2
        while candidate in self._paths:
            candidate = f"{base}_{suffix}"
            suffix += 1

        self._ids[relative_path] = candidate
        self._paths[candidate] = relative_path
        return candidate

    @property
    def paths(self) -> Dict[str, str]:
        return dict(self._paths)


def _classify(full_path: str, boundary: str, ancestors: FrozenSet[str]) -> bool:
    """
    Return True if ``full_path`` should be walked as a directory.

    Symbolic links that resolve outside ``boundary`` are reported as leaves and
    never followed.

    Raises:
        OSError: If the entry cannot be stat'ed (dangling link, vanished entry).
        WalkFailure: If a directory link points back to one of its ancestors.
    """
    if os.path.islink(full_path) and not is_within(full_path, boundary):
        logger.warning(f"Not following symbolic link {full_path} outside the repository")
        return False

    is_dir = stat.S_ISDIR(os.stat(full_path).st_mode)
    if is_dir and os.path.realpath(full_path) in ancestors:
        raise WalkFailure(full_path, "symbolic link cycle")
    return is_dir


def _list_children(
    directory: str,
    exclusions: FrozenSet[str],
    order: EntryOrder,
    on_error: ErrorPolicy,
    boundary: str,
    ancestors: FrozenSet[str],
) -> List[Tuple[str, str, bool]]:
    """
    List and classify the immediate children of a directory.

    Excluded names are dropped before classification so that nothing below them
    is ever touched. Classification follows symbolic links inside the
    repository, so a dangling link counts as an unreadable entry.

    Returns:
        List of (name, full_path, is_dir) in the requested order.

    Raises:
        WalkFailure: If the directory cannot be listed, a child cannot be
            classified or a link cycle is found, and ``on_error`` is "raise".
    """
    try:
        names = os.listdir(directory)
    except OSError as e:
        if on_error == "skip":
            logger.warning(f"Skipping unreadable directory {directory}: {e}")
            return []
        raise WalkFailure(directory, e.strerror or str(e)) from e

    children = []
    for name in names:
        if name in exclusions:
            continue
        full_path = os.path.join(directory, name)
        try:
            is_dir = _classify(full_path, boundary, ancestors)
        except WalkFailure as e:
            if on_error == "skip":
                logger.warning(f"Skipping {full_path}: {e}")
                continue
            raise
        except OSError as e:
            if on_error == "skip":
                logger.warning(f"Skipping unreadable entry {full_path}: {e}")
                continue
            raise WalkFailure(full_path, e.strerror or str(e)) from e
        children.append((name, full_path, is_dir))

    if order == "name":
        children.sort(key=lambda child: (not child[2], child[0]))
    return children


def iter_entries(
    root: str,
    exclusions: Iterable[str] = DEFAULT_EXCLUSIONS,
    order: EntryOrder = "listing",
    on_error: ErrorPolicy = "raise",
    prefix: str = "",
    depth: int = 0,
    _boundary: Optional[str] = None,
    _ancestors: Optional[FrozenSet[str]] = None,
) -> Iterator[WalkStep]:
    """
    Yield every non-excluded entry below ``root`` depth-first.

    A directory is yielded before its contents. Each step carries its depth and
    whether it is the last of its siblings, which is all the text renderer
    needs. Calling the function again re-reads the filesystem. Nothing outside
    the top-level ``root`` is ever descended into.

    Args:
        root: Directory to walk.
        exclusions: Entry names never yielded or descended into, at any depth.
        order: "listing" or "name" (directories first, then by name).
        on_error: "raise" or "skip" for unreadable entries and link cycles.
        prefix: Relative path of ``root`` inside the repository.
        depth: Depth of ``root``'s children.

    Raises:
        WalkFailure: On an unreadable directory or entry, or a symbolic link
            that points back to one of its ancestors.
    """
    exclusions = frozenset(exclusions)
    boundary = _boundary or os.path.realpath(root)
    ancestors = (_ancestors or frozenset()) | {os.path.realpath(root)}

    children = _list_children(root, exclusions, order, on_error, boundary, ancestors)
    last_index = len(children) - 1

    for index, (name, full_path, is_dir) in enumerate(children):
        relative_path = f"{prefix}/{name}" if prefix else name
        yield WalkStep(
            name=name,
            full_path=full_path,
            relative_path=relative_path,
            is_dir=is_dir,
            depth=depth,
            is_last=index == last_index,
            parent=prefix or None,
        )

        if is_dir:
            yield from iter_entries(
                full_path,
                exclusions,
                order,
                on_error,
                prefix=relative_path,
                depth=depth + 1,
                _boundary=boundary,
                _ancestors=ancestors,
            )


def _escape_label(name: str) -> str:
    return display_name(name).replace("#", "#35;").replace('"', "#quot;")


class _GraphBuilder:
    """Accumulates Mermaid lines while steps stream past in depth-first order."""

    def __init__(self) -> None:
        self.registry = NodeIdRegistry()
        self.lines: List[str] = []
        self.declarations: List[str] = []
        self.edges: List[str] = []
        # (depth, node_id, child ids) for directories whose subtree is still open
        self._open: List[Tuple[int, str, List[str]]] = []

    def add(self, step: WalkStep) -> None:
        self._close_until(step.depth)

        node_id = self.registry.id_for(step.relative_path)
        icon = DIRECTORY_ICON if step.is_dir else FILE_ICON
        declaration = f'{node_id}["{icon} {_escape_label(step.name)}"]'
        self.declarations.append(declaration)
        self.lines.append(declaration)

        if self._open:
            self._open[-1][2].append(node_id)
        if step.is_dir:
            self._open.append((step.depth, node_id, []))

    def _close_until(self, depth: int) -> None:
        while self._open and self._open[-1][0] >= depth:
            _, parent_id, child_ids = self._open.pop()
            for child_id in child_ids:
                edge = f"{parent_id} --> {child_id}"
                self.edges.append(edge)
                self.lines.append(edge)

    def finish(self) -> GraphDescription:
        self._close_until(0)
        return GraphDescription(
            lines=self.lines,
            declarations=self.declarations,
            edges=self.edges,
            node_paths=self.registry.paths,
        )


class RepoWalker:
    """
    Builds the node tree, text tree and graph description of a repository.

    All three views come from one pass over :func:`iter_entries`, so they always
    agree on which entries exist and in which order.

    Attributes:
        exclusions: Names skipped at every depth.
        order: Sibling order shared by every view.
        on_error: What to do with unreadable entries.
    """

    def __init__(
        self,
        exclusions: Iterable[str] = DEFAULT_EXCLUSIONS,
        order: EntryOrder = "listing",
        on_error: ErrorPolicy = "raise",
    ) -> None:
        self.exclusions = frozenset(exclusions)
        self.order = order
        self.on_error = on_error

    def walk(self, root: str) -> RepositoryStructure:
        """
        Walk ``root`` and return every derived view.

        Args:
            root: Path of the checked-out repository.

        Returns:
            RepositoryStructure with the nested entries, the Mermaid graph, the
            rendered text tree and file/directory counts.

        Raises:
            WalkFailure: If any part of the tree cannot be read (unless the
                walker was created with ``on_error="skip"``).
        """
        logger.info(f"Walking repository tree at {root}")

        top_level: List[FileSystemEntry] = []
        directories: Dict[str, FileSystemEntry] = {}
        graph = _GraphBuilder()
        text_lines: List[str] = []
        indents: List[str] = []
        total_files = 0
        total_directories = 0

        for step in iter_entries(root, self.exclusions, self.order, self.on_error):
            entry = FileSystemEntry(
                name=step.name,
                type="directory" if step.is_dir else "file",
                path=step.full_path,
                relative_path=step.relative_path,
                children=[] if step.is_dir else None,
            )
            siblings = directories[step.parent].children if step.parent else top_level
            siblings.append(entry)

            del indents[step.depth:]
            glyph = TERMINAL_GLYPH if step.is_last else BRANCH_GLYPH
            icon = DIRECTORY_ICON if step.is_dir else FILE_ICON
            text_lines.append(f"{''.join(indents)}{glyph} {icon} {display_name(step.name)}\n")

            graph.add(step)

            if step.is_dir:
                directories[step.relative_path] = entry
                indents.append(TERMINAL_INDENT if step.is_last else BRANCH_INDENT)
                total_directories += 1
            else:
                total_files += 1

        logger.info(f"Walk complete: {total_files} files, {total_directories} directories")
        return RepositoryStructure(
            file_structure=top_level,
            graph=graph.finish(),
            tree_structure="".join(text_lines),
            total_files=total_files,
            total_directories=total_directories,
        )

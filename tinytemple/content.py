"""Content discovery for tinytemple.

This module walks the source directory and classifies every file it finds.
Templates and Markdown files are rendered; anything else is a passthrough
file that is copied into the output tree verbatim.

Key classes:
- SourceKind: The three kinds of source file.
- SourceEntry: One discovered file with its relative and absolute paths.

Key functions:
- scan: Discover all files under a source directory.
- pair_markdown: Associate Markdown files with the templates that embed them.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePath

from .errors import ScanError
from .utils import html_destination, is_markdown, is_template, strip_source_suffix

logger = logging.getLogger(__name__)


class SourceKind(enum.Enum):
    TEMPLATE = "template"
    MARKDOWN = "markdown"
    STATIC = "static"


@dataclass(frozen=True)
class SourceEntry:
    """A file found in the source directory.

    Attributes:
        relative_path: Path relative to the source directory.
        absolute_path: Path on disk.
        kind: How the file is processed.
    """

    relative_path: PurePath
    absolute_path: Path
    kind: SourceKind

    @property
    def destination(self) -> PurePath:
        """Relative path of this entry inside the output directory."""
        if self.kind is SourceKind.STATIC:
            return self.relative_path
        return html_destination(self.relative_path)

    @property
    def stem_path(self) -> PurePath:
        """Relative path without the template or Markdown extension."""
        return strip_source_suffix(self.relative_path)


def classify(path: PurePath) -> SourceKind:
    """Return the SourceKind for a file name.

    Args:
        path: Path of the file.

    Returns:
        TEMPLATE for template extensions, MARKDOWN for ``.md``, else STATIC.
    """
    if is_template(path):
        return SourceKind.TEMPLATE
    if is_markdown(path):
        return SourceKind.MARKDOWN
    return SourceKind.STATIC


def scan(source_dir: Path) -> list[SourceEntry]:
    """Discover every file under a source directory.

    Args:
        source_dir: Directory holding templates, Markdown and other files.

    Returns:
        Entries sorted by relative path. An empty directory gives an empty
        list.

    Raises:
        ScanError: If the directory does not exist or cannot be read.
    """
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        raise ScanError("source directory does not exist", source_dir)
    try:
        # rglob quietly skips unreadable directories, so probe the root first
        next(source_dir.iterdir(), None)
        paths = [path for path in source_dir.rglob("*") if path.is_file()]
    except OSError as exc:
        raise ScanError(f"unable to read source directory: {exc}", source_dir) from exc

    entries = []
    for path in paths:
        rel = path.relative_to(source_dir)
        entries.append(SourceEntry(rel, path, classify(rel)))
    entries.sort(key=lambda entry: entry.relative_path.as_posix())
    logger.debug("discovered %d entries in %s", len(entries), source_dir)
    return entries


def pair_markdown(entries: Iterable[SourceEntry]) -> dict[PurePath, SourceEntry]:
    """Associate Markdown files with templates sharing their path stem.

    ``about.hbs`` embeds ``about.md``; ``blog/post.html.jinja`` embeds
    ``blog/post.md``.

    Args:
        entries: Discovered source entries.

    Returns:
        Mapping from a template's relative path to its Markdown entry.
        Templates without a Markdown file are absent.
    """
    entries = list(entries)
    markdown = {
        entry.stem_path: entry
        for entry in entries
        if entry.kind is SourceKind.MARKDOWN
    }
    return {
        entry.relative_path: markdown[entry.stem_path]
        for entry in entries
        if entry.kind is SourceKind.TEMPLATE and entry.stem_path in markdown
    }

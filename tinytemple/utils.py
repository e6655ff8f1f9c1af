"""Utility functions for tinytemple.

Key functions:
    is_markdown: Check if a path is a Markdown file.
    is_template: Check if a path is a template file.
    strip_source_suffix: Drop the template or Markdown extension from a path.
    html_destination: Relative output path of a rendered source file.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import shutil
from pathlib import PurePath

# Longest first so ``.html.jinja`` wins over ``.jinja``
TEMPLATE_SUFFIXES = (".html.jinja", ".jinja", ".hbs")
MARKDOWN_SUFFIX = ".md"


def is_markdown(path: PurePath) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has .md extension (case-insensitive).
    """
    return path.suffix.lower() == MARKDOWN_SUFFIX


def is_template(path: PurePath) -> bool:
    """Check if a path is a template file.

    Matches ``.hbs``, ``.jinja`` and ``.html.jinja`` extensions.

    Args:
        path: Path to check.

    Returns:
        True if the file is a template.
    """
    return _template_suffix(path) is not None


def _template_suffix(path: PurePath) -> str | None:
    name = path.name.lower()
    for suffix in TEMPLATE_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            return suffix
    return None


def strip_source_suffix(path: PurePath) -> PurePath:
    """Remove the template or Markdown extension from a path.

    Args:
        path: Relative path of a template or Markdown file.

    Returns:
        The same path without its source extension. Other paths are
        returned unchanged.

    Examples:
        >>> strip_source_suffix(PurePath("blog/post.html.jinja"))
        PurePosixPath('blog/post')
    """
    suffix = _template_suffix(path)
    if suffix is None and is_markdown(path):
        suffix = MARKDOWN_SUFFIX
    if suffix is None:
        return path
    return path.with_name(path.name[: -len(suffix)])


def html_destination(path: PurePath) -> PurePath:
    """Return the relative output path for a rendered source file.

    Args:
        path: Relative path of a template or Markdown file.

    Returns:
        The path with its source extension replaced by ``.html``.
    """
    stripped = strip_source_suffix(path)
    return stripped.with_name(f"{stripped.name}.html")


def ensure_clean_dir(path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)

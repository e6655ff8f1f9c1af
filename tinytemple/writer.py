"""Output writing for tinytemple.

Rendered pages are written first and always replace whatever is at their
destination. Static files are copied afterwards and never replace an
existing file, so a rendered page wins over a static file with the same
name, and files left in the output directory by an earlier run survive.

Key classes:
- RenderedOutput: A rendered page waiting to be written.
- CopyReport: Destinations copied and skipped by a static copy.

Key functions:
- write_rendered: Write rendered pages into the output directory.
- copy_static: Mirror a static directory into the output directory.
- copy_files: Copy passthrough source files into the output directory.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from .content import SourceEntry
from .errors import WriteError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedOutput:
    """A rendered page.

    Attributes:
        destination: Path relative to the output directory.
        content: Encoded HTML.
        source: Source file the page was rendered from.
    """

    destination: PurePath
    content: bytes
    source: Path | None = None


@dataclass
class CopyReport:
    """Result of a non-clobbering copy.

    Attributes:
        copied: Destinations that were written.
        skipped: Destinations left alone because they already existed.
    """

    copied: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)

    def extend(self, other: CopyReport) -> None:
        self.copied.extend(other.copied)
        self.skipped.extend(other.skipped)


def write_rendered(outputs: Iterable[RenderedOutput], out_dir: Path) -> list[Path]:
    """Write rendered pages into the output directory.

    Existing files at a destination are overwritten. Writing stops at the
    first failure; files written before it are kept.

    Args:
        outputs: Rendered pages.
        out_dir: Output directory, created if missing.

    Returns:
        Paths of the written files, in order.

    Raises:
        WriteError: If a directory or file cannot be written.
    """
    out_dir = Path(out_dir)
    written: list[Path] = []
    _make_dir(out_dir)
    for output in outputs:
        target = out_dir / output.destination
        _make_dir(target.parent)
        try:
            target.write_bytes(output.content)
        except OSError as exc:
            raise WriteError(f"unable to write output file: {exc}", target) from exc
        logger.debug("wrote %s", target)
        written.append(target)
    return written


def copy_static(static_dir: Path, out_dir: Path) -> CopyReport:
    """Mirror every file of a static directory into the output directory.

    Destinations that already exist are skipped. A missing static directory
    copies nothing.

    Args:
        static_dir: Directory of files to copy verbatim.
        out_dir: Output directory, created if missing.

    Returns:
        CopyReport listing copied and skipped destinations.

    Raises:
        WriteError: If a file cannot be read or written, or static_dir is
            not a directory.
    """
    static_dir = Path(static_dir)
    out_dir = Path(out_dir)
    report = CopyReport()
    if not static_dir.exists():
        logger.debug("no static directory at %s", static_dir)
        return report
    if not static_dir.is_dir():
        raise WriteError("static path is not a directory", static_dir)
    _make_dir(out_dir)
    try:
        files = sorted(path for path in static_dir.rglob("*") if path.is_file())
    except OSError as exc:
        raise WriteError(f"unable to read static directory: {exc}", static_dir) from exc
    for path in files:
        _copy_file(path, out_dir / path.relative_to(static_dir), report)
    return report


def copy_files(entries: Iterable[SourceEntry], out_dir: Path) -> CopyReport:
    """Copy passthrough source files into the output directory.

    Uses the same non-clobber rule as copy_static.

    Args:
        entries: Source entries to copy.
        out_dir: Output directory, created if missing.

    Returns:
        CopyReport listing copied and skipped destinations.

    Raises:
        WriteError: If a file cannot be read or written.
    """
    out_dir = Path(out_dir)
    report = CopyReport()
    _make_dir(out_dir)
    for entry in entries:
        _copy_file(entry.absolute_path, out_dir / entry.destination, report)
    return report


def _copy_file(source: Path, target: Path, report: CopyReport) -> None:
    if target.exists():
        # Non-clobber: not an error
        logger.debug("skip existing %s", target)
        report.skipped.append(target)
        return
    _make_dir(target.parent)
    try:
        shutil.copy2(source, target)
    except OSError as exc:
        raise WriteError(f"unable to copy {source}: {exc}", target) from exc
    logger.debug("copied %s -> %s", source, target)
    report.copied.append(target)


def _make_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"unable to create directory: {exc}", path) from exc

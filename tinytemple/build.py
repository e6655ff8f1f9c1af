"""Site building for tinytemple.

This module runs the whole pipeline: load the configuration, discover the
source files, render templates and Markdown, write the rendered pages, then
copy passthrough and static files without overwriting anything.

The pipeline moves through the stages of ``Stage`` in order. The first
error stops the build and is raised as a BuildError naming the stage and the
file; nothing is retried and no partial result is returned.

Key functions:
- build_site: Main function to build the entire site.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from .config import Table, load
from .content import SourceEntry, SourceKind, pair_markdown, scan
from .errors import RenderError, TinyTempleError, WriteError
from .renderers import MarkdownRenderer, default_markdown_renderer
from .templates import TemplateEngine, build_context, default_engine
from .utils import ensure_clean_dir
from .writer import CopyReport, RenderedOutput, copy_files, copy_static, write_rendered

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_DIR = Path("content")
DEFAULT_STATIC_DIR = Path("static")
DEFAULT_OUTPUT_DIR = Path("html")
DEFAULT_CONFIG = Path("tinytemple.toml")


class Stage(enum.Enum):
    """Pipeline states, in order."""

    INIT = "init"
    CONFIG_LOADED = "config loaded"
    DISCOVERED = "discovered"
    RENDERED = "rendered"
    WRITTEN = "written"
    DONE = "done"


# What the pipeline is doing while it sits in each state
_STEPS = {
    Stage.INIT: "loading config",
    Stage.CONFIG_LOADED: "discovering sources",
    Stage.DISCOVERED: "rendering",
    Stage.RENDERED: "writing output",
    Stage.WRITTEN: "copying static files",
}


class BuildError(Exception):
    """Error during site build with stage and file context.

    Attributes:
        stage: State the pipeline was in when it failed.
        source_path: Path to the file that caused the error, if known.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        stage: Stage,
        source_path: Path | None,
        message: str,
        original_error: Exception | None = None,
    ):
        self.stage = stage
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        where = f"{source_path}: " if source_path is not None else ""
        super().__init__(f"{self.step} failed: {where}{message}")

    @property
    def step(self) -> str:
        """Description of the step that failed."""
        return _STEPS.get(self.stage, self.stage.value)


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        outputs: Rendered pages, in discovery order.
        written: Files written for the rendered pages.
        copied: Files copied from the source and static directories.
        skipped: Copy destinations left alone because they already existed.
        output_dir: Directory where the site was built.
        elapsed: Build time in seconds.
        stage: Final pipeline state.
    """

    outputs: list[RenderedOutput]
    output_dir: Path
    written: list[Path] = field(default_factory=list)
    copied: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    elapsed: float = 0.0
    stage: Stage = Stage.DONE


def build_site(
    source_dir: Path = DEFAULT_SOURCE_DIR,
    static_dir: Path = DEFAULT_STATIC_DIR,
    output_dir: Path = DEFAULT_OUTPUT_DIR,
    config_path: Path = DEFAULT_CONFIG,
    clean: bool = False,
    engine: TemplateEngine | None = None,
    markdown: MarkdownRenderer | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        source_dir: Directory with templates, Markdown and passthrough files.
        static_dir: Directory of files copied verbatim into the output.
        output_dir: Directory the site is written to.
        config_path: Configuration file providing template variables.
        clean: Whether to wipe the output directory before writing.
        engine: Optional custom template engine.
        markdown: Optional custom Markdown renderer.

    Returns:
        BuildResult describing what was written and copied.

    Raises:
        BuildError: If any stage fails.
    """
    started = time.perf_counter()
    engine = engine or default_engine
    markdown = markdown or default_markdown_renderer
    source_dir, static_dir, output_dir = (
        Path(source_dir),
        Path(static_dir),
        Path(output_dir),
    )

    stage = Stage.INIT
    try:
        config = load(config_path)
        stage = _advance(stage, Stage.CONFIG_LOADED)

        entries = scan(source_dir)
        stage = _advance(stage, Stage.DISCOVERED)

        outputs, passthrough = _render_all(entries, config, engine, markdown)
        stage = _advance(stage, Stage.RENDERED)

        if clean:
            _clean(output_dir, [source_dir, static_dir, Path(config_path)])
        written = write_rendered(outputs, output_dir)
        stage = _advance(stage, Stage.WRITTEN)

        report = copy_files(passthrough, output_dir)
        report.extend(copy_static(static_dir, output_dir))
        stage = _advance(stage, Stage.DONE)
    except TinyTempleError as exc:
        logger.debug("stage %s -> failed while %s", stage.value, _STEPS[stage])
        raise BuildError(stage, exc.path, exc.message, exc) from exc

    result = _result(outputs, output_dir, written, report)
    result.elapsed = time.perf_counter() - started
    logger.info(
        "built %d pages into %s in %.2fs", len(outputs), output_dir, result.elapsed
    )
    return result


def _advance(current: Stage, target: Stage) -> Stage:
    logger.debug("stage %s -> %s", current.value, target.value)
    return target


def _render_all(
    entries: list[SourceEntry],
    config: Table,
    engine: TemplateEngine,
    markdown: MarkdownRenderer,
) -> tuple[list[RenderedOutput], list[SourceEntry]]:
    """Render every template and Markdown entry.

    Markdown files paired with a template are embedded into that template
    and produce no page of their own.

    Returns:
        Tuple of (rendered pages, passthrough entries to copy).
    """
    pairs = pair_markdown(entries)
    embedded = {entry.relative_path for entry in pairs.values()}
    outputs: list[RenderedOutput] = []
    passthrough: list[SourceEntry] = []
    claimed: dict[PurePath, PurePath] = {}

    for entry in entries:
        if entry.kind is SourceKind.STATIC:
            passthrough.append(entry)
            continue
        if entry.kind is SourceKind.MARKDOWN:
            if entry.relative_path in embedded:
                continue
            html = markdown.render(_read(entry))
        else:
            paired = pairs.get(entry.relative_path)
            content = markdown.render(_read(paired)) if paired else None
            context = build_context(config, content)
            # newline="" keeps the template's own line endings
            text = _read(entry, newline="")
            html = engine.render(text, context, entry.absolute_path)

        destination = entry.destination
        if destination in claimed:
            raise RenderError(
                f"output {destination} is already rendered from "
                f"{claimed[destination]}",
                entry.absolute_path,
            )
        claimed[destination] = entry.relative_path
        outputs.append(
            RenderedOutput(destination, html.encode("utf-8"), entry.absolute_path)
        )
        logger.debug("rendered %s -> %s", entry.relative_path, destination)
    return outputs, passthrough


def _read(entry: SourceEntry, newline: str | None = None) -> str:
    try:
        with open(entry.absolute_path, encoding="utf-8", newline=newline) as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise RenderError(
            f"unable to read source file: {exc}", entry.absolute_path
        ) from exc


def _clean(output_dir: Path, inputs: list[Path]) -> None:
    target = output_dir.resolve()
    for path in inputs:
        resolved = Path(path).resolve()
        if resolved == target or resolved.is_relative_to(target):
            raise WriteError(
                f"refusing to clean output directory: it contains {path}",
                output_dir,
            )
    try:
        ensure_clean_dir(output_dir)
    except OSError as exc:
        raise WriteError(
            f"unable to clear output directory: {exc}", output_dir
        ) from exc


def _result(
    outputs: list[RenderedOutput],
    output_dir: Path,
    written: list[Path],
    report: CopyReport,
) -> BuildResult:
    return BuildResult(
        outputs=outputs,
        output_dir=output_dir,
        written=written,
        copied=report.copied,
        skipped=report.skipped,
    )

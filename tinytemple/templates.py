"""Template rendering for tinytemple.

Templates are literal text with ``{{ dotted.path }}`` placeholders. Jinja2
parses the template; the placeholders are then resolved here against the
configuration tree rather than by Jinja2's runtime, so a missing variable or
a list used as text is reported with its exact dotted path instead of being
rendered as an empty string.

Only plain substitution is supported. Statements (``{% ... %}``), filters,
calls, literals and operators are rejected. Path segments may contain
letters, digits, underscores and hyphens.

Escaping: values taken from the configuration are HTML-escaped. The
rendered Markdown injected as ``content`` is already HTML and is inserted
verbatim.

Key classes:
- TemplateEngine: Parses and renders templates against a RenderContext.

Key functions:
- build_context: Build the per-file RenderContext.
- resolve: Walk a dotted path through a configuration tree.
- to_text: Convert a scalar configuration value to its text form.
- render_template: Render a template with the default engine.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from jinja2 import Environment, TemplateSyntaxError, nodes
from markupsafe import Markup, escape

from .config import ConfigValue, Table, ValueKind, kind_of
from .errors import RenderError

CONTENT_VARIABLE = "content"

_PATH_RE = re.compile(r"[\w-]+(?:\.[\w-]+)*")
_NEWLINE_RE = re.compile(r"\r\n|\r|\n")

RenderContext = Mapping[str, ConfigValue]


def build_context(config: Table, content: str | None = None) -> RenderContext:
    """Build the RenderContext for one file.

    The configuration table is never modified; a new read-only mapping is
    returned for every call.

    Args:
        config: Root table of the loaded configuration.
        content: Rendered Markdown fragment to expose as ``content``, if the
            file has one.

    Returns:
        Read-only mapping of variable names to values.
    """
    context = dict(config)
    if content is None:
        context.pop(CONTENT_VARIABLE, None)
    else:
        context[CONTENT_VARIABLE] = Markup(content)
    return MappingProxyType(context)


def resolve(context: RenderContext, path: str) -> ConfigValue:
    """Resolve a dotted variable path.

    Args:
        context: Root table to resolve against.
        path: Dotted path such as ``site.title``.

    Returns:
        The value found at the end of the path.

    Raises:
        RenderError: If a segment is missing or an intermediate value is not
            a table.
    """
    current: ConfigValue = context
    walked: list[str] = []
    for segment in path.split("."):
        kind = kind_of(current)
        if kind is not ValueKind.TABLE:
            raise RenderError(
                f"cannot resolve '{path}': '{'.'.join(walked)}' is a "
                f"{kind.value}, not a table",
                variable=path,
            )
        if segment not in current:
            raise RenderError(f"unresolved variable '{path}'", variable=path)
        current = current[segment]
        walked.append(segment)
    return current


def to_text(value: ConfigValue, path: str) -> str:
    """Convert a scalar value to the text inserted into a template.

    Args:
        value: Value to convert.
        path: Dotted path the value came from, for error messages.

    Returns:
        Strings as-is, integers and floats in their canonical decimal form,
        booleans as ``true``/``false``.

    Raises:
        RenderError: If the value is a list or table.
    """
    kind = kind_of(value)
    if kind is ValueKind.STRING:
        return value
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.NUMBER:
        return repr(value) if isinstance(value, float) else str(value)
    raise RenderError(
        f"'{path}' is a {kind.value}; structured values cannot be inserted "
        "into a template",
        variable=path,
    )


def _newline_of(text: str) -> str:
    """Return the first line ending used in ``text``, defaulting to ``\\n``."""
    match = _NEWLINE_RE.search(text)
    return match.group(0) if match else "\n"


class TemplateEngine:
    """Renders templates by substituting configuration values.

    Jinja2 parses the template to report syntax errors and reject
    statements. Placeholder paths are then read from the raw token stream,
    so keys such as ``og-image`` or ``2024`` that are not valid Python
    names can still be referenced.

    Attributes:
        env: Jinja2 environment used to parse templates.
    """

    def __init__(self):
        self.env = Environment(keep_trailing_newline=True, autoescape=False)

    def render(
        self,
        template_text: str,
        context: RenderContext,
        path: Path | None = None,
    ) -> str:
        """Render a template.

        Args:
            template_text: Template source.
            context: Variables available to the template.
            path: Template file, used in error messages.

        Returns:
            Rendered HTML. Literal text keeps the template's line endings.

        Raises:
            RenderError: On syntax errors, unsupported constructs, unresolved
                variables and structured values used as text.
        """
        filename = str(path) if path else None
        try:
            template = self.env.parse(template_text, filename=filename)
            tokens = list(self.env.lex(template_text, filename=filename))
        except TemplateSyntaxError as exc:
            raise RenderError(
                exc.message or "syntax error", path, line=exc.lineno
            ) from exc

        for node in template.body:
            if not isinstance(node, nodes.Output):
                raise RenderError(
                    "only {{ variable }} placeholders are supported",
                    path,
                    line=node.lineno,
                )

        # the lexer turns every line ending into \n
        newline = _newline_of(template_text)
        parts: list[str] = []
        placeholder: list[str] | None = None
        start_line = 0
        for lineno, token, value in tokens:
            if token == "variable_begin":
                placeholder, start_line = [], lineno
            elif token == "variable_end":
                expression = "".join(placeholder).strip()
                parts.append(self._substitute(expression, context, path, start_line))
                placeholder = None
            elif placeholder is not None:
                placeholder.append(value)
            elif token == "data":
                parts.append(value.replace("\n", newline))
        return "".join(parts)

    def _substitute(
        self,
        expression: str,
        context: RenderContext,
        path: Path | None,
        line: int,
    ) -> str:
        if not _PATH_RE.fullmatch(expression):
            raise RenderError(
                "placeholders must name a variable such as {{ site.title }}",
                path,
                line=line,
            )
        try:
            text = to_text(resolve(context, expression), expression)
        except RenderError as exc:
            raise RenderError(
                exc.message, path, variable=exc.variable, line=line
            ) from None
        # Markup (the content fragment) passes through escape() unchanged
        return str(escape(text))


default_engine = TemplateEngine()


def render_template(
    template_text: str, context: RenderContext, path: Path | None = None
) -> str:
    """Render a template with the default engine.

    Args:
        template_text: Template source.
        context: Variables available to the template.
        path: Template file, used in error messages.

    Returns:
        Rendered HTML.
    """
    return default_engine.render(template_text, context, path)

"""Markdown rendering for tinytemple.

Markdown files are converted into HTML fragments (no ``<html>`` or
``<body>`` wrapper) ready to be embedded into a template through the
reserved ``content`` variable.

Key classes:
- MarkdownRenderer: Renders Markdown to HTML with syntax highlighting.

Key functions:
- render_markdown: Render Markdown text with the default renderer.
"""

from __future__ import annotations

import mistune
from markupsafe import escape
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

MARKDOWN_PLUGINS = ["strikethrough", "footnotes", "table", "url", "task_lists"]


class _HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer that highlights fenced code blocks with Pygments.

    Raw HTML in the Markdown source is passed through unchanged.
    """

    def __init__(self):
        super().__init__(escape=False)

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block with Pygments syntax highlighting.

        Args:
            code: The code content.
            info: Language identifier (e.g., 'python', 'javascript').

        Returns:
            HTML string with highlighted code, or a plain escaped block
            when the language is unknown.
        """
        lang = info.split(None, 1)[0] if info and info.strip() else None
        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        lang_class = f' class="language-{escape(lang)}"' if lang else ""
        return f"<pre><code{lang_class}>{escape(code)}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown content to HTML fragments.

    Supports the CommonMark block and inline constructs plus tables,
    footnotes, strikethrough, task lists and bare-URL links. Rendering
    never touches the network or the filesystem and never fails: malformed
    Markdown degrades to literal text.
    """

    def __init__(self, plugins: list[str] | None = None):
        self.plugins = list(MARKDOWN_PLUGINS if plugins is None else plugins)

    def render(self, text: str) -> str:
        """Render Markdown text to an HTML fragment.

        Args:
            text: Markdown source.

        Returns:
            HTML fragment.
        """
        markdown = mistune.create_markdown(
            renderer=_HighlightRenderer(), plugins=self.plugins
        )
        return markdown(text)


default_markdown_renderer = MarkdownRenderer()


def render_markdown(text: str) -> str:
    """Render Markdown text to an HTML fragment.

    Args:
        text: Markdown source.

    Returns:
        HTML fragment with no document wrapper.
    """
    return default_markdown_renderer.render(text)

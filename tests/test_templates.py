from pathlib import Path

import pytest

from tinytemple.errors import RenderError
from tinytemple.templates import (
    TemplateEngine,
    build_context,
    render_template,
    resolve,
    to_text,
)

CONFIG = {
    "site": {
        "title": "Demo",
        "tagline": "Fish & <chips>",
        "author": {"name": "Ada"},
        "menu": ("Home", "About"),
    },
    "year": 2024,
    "ratio": 2.5,
    "published": True,
    "draft": False,
}


def test_substitutes_nested_variables():
    context = build_context(CONFIG)
    assert render_template("<h1>{{site.title}}</h1>", context) == "<h1>Demo</h1>"
    assert (
        render_template("by {{ site.author.name }}, {{ year }}", context)
        == "by Ada, 2024"
    )


def test_scalar_coercion():
    context = build_context(CONFIG)
    assert render_template("{{ published }}/{{ draft }}", context) == "true/false"
    assert render_template("{{ ratio }}", context) == "2.5"
    assert to_text(3.0, "x") == "3.0"
    assert to_text(-7, "x") == "-7"


def test_config_strings_are_escaped():
    context = build_context(CONFIG)
    assert render_template("{{ site.tagline }}", context) == "Fish &amp; &lt;chips&gt;"


def test_content_is_inserted_verbatim():
    context = build_context(CONFIG, "<h1>Hi</h1>\n")
    assert (
        render_template("<main>{{ content }}</main>", context)
        == "<main><h1>Hi</h1>\n</main>"
    )


def test_content_shadows_config_without_mutating_it():
    config = {"content": "from config"}
    context = build_context(config, "<p>md</p>")
    assert render_template("{{ content }}", context) == "<p>md</p>"
    assert config == {"content": "from config"}

    without = build_context(config)
    with pytest.raises(RenderError) as excinfo:
        render_template("{{ content }}", without)
    assert excinfo.value.variable == "content"


def test_context_is_read_only():
    context = build_context(CONFIG)
    with pytest.raises(TypeError):
        context["year"] = 1999


def test_missing_variable_names_the_path():
    context = build_context(CONFIG)
    with pytest.raises(RenderError) as excinfo:
        render_template("<p>ok</p>\n<h1>{{ site.titel }}</h1>", context)
    assert excinfo.value.variable == "site.titel"
    assert excinfo.value.line == 2
    assert "site.titel" in str(excinfo.value)


def test_missing_top_level_variable():
    with pytest.raises(RenderError) as excinfo:
        render_template("{{ nope }}", build_context(CONFIG))
    assert excinfo.value.variable == "nope"


def test_walking_through_a_scalar_is_an_error():
    with pytest.raises(RenderError) as excinfo:
        resolve(build_context(CONFIG), "site.title.length")
    assert excinfo.value.variable == "site.title.length"
    assert "'site.title' is a string" in excinfo.value.message


def test_structured_values_cannot_be_inlined():
    context = build_context(CONFIG)
    with pytest.raises(RenderError) as excinfo:
        render_template("{{ site.menu }}", context)
    assert excinfo.value.variable == "site.menu"
    with pytest.raises(RenderError):
        render_template("{{ site.author }}", context)


@pytest.mark.parametrize(
    "source",
    [
        "{% if site %}x{% endif %}",
        "{{ site.title | upper }}",
        "{{ 'literal' }}",
        "{{ year + 1 }}",
        "{{ site['title'] }}",
        "{{ url_for('x') }}",
    ],
)
def test_unsupported_constructs(source):
    with pytest.raises(RenderError):
        render_template(source, build_context(CONFIG))


def test_syntax_error_reports_file_and_line():
    path = Path("content/index.hbs")
    with pytest.raises(RenderError) as excinfo:
        render_template("line one\n{{ site.title ", build_context(CONFIG), path)
    assert excinfo.value.path == path
    assert excinfo.value.line is not None


def test_literal_text_is_preserved():
    context = build_context(CONFIG)
    source = "<p>\n  {# note #}{{ year }}\n</p>\n"
    assert render_template(source, context) == "<p>\n  2024\n</p>\n"
    assert render_template("{% raw %}{{ x }}{% endraw %}", context) == "{{ x }}"


def test_rendering_is_deterministic():
    engine = TemplateEngine()
    context = build_context(CONFIG, "<p>body</p>")
    source = "<title>{{ site.title }}</title>{{ content }}"
    assert engine.render(source, context) == engine.render(source, context)


def test_error_carries_template_path():
    path = Path("content/about.hbs")
    with pytest.raises(RenderError) as excinfo:
        TemplateEngine().render("{{ missing }}", build_context(CONFIG), path)
    assert excinfo.value.path == path


def test_hyphenated_and_numeric_keys():
    context = build_context(
        {"site": {"og-image": "a.png"}, "years": {"2024": "launch"}}
    )
    assert (
        render_template('<meta content="{{ site.og-image }}">', context)
        == '<meta content="a.png">'
    )
    assert render_template("{{ years.2024 }}", context) == "launch"


def test_hyphenated_key_missing_names_the_path():
    with pytest.raises(RenderError) as excinfo:
        render_template("{{ site.og-title }}", build_context(CONFIG))
    assert excinfo.value.variable == "site.og-title"


def test_whitespace_inside_a_path_is_rejected():
    with pytest.raises(RenderError):
        render_template("{{ site. title }}", build_context(CONFIG))


def test_crlf_line_endings_are_kept():
    context = build_context({"x": 1})
    assert render_template("<p>\r\n{{ x }}\r\n</p>\r\n", context) == (
        "<p>\r\n1\r\n</p>\r\n"
    )
    assert render_template("<p>\n{{ x }}\n</p>\n", context) == "<p>\n1\n</p>\n"

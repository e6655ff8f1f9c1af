"""tinytemple static site generator.

This package renders templates with ``{{ dotted.path }}`` placeholders,
filled from a TOML configuration file and from Markdown content, into a
directory of static HTML pages. Static files are merged into the output
without overwriting anything already there.

The main entry point is the CLI module; ``build.build_site`` runs the same
pipeline from Python.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"

"""
MkDocs plugin running the transform on every rendered page.

    plugins:
      - mathpress:
          output: svg
          svg:
            font_cache: local
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import mkdocs
from mkdocs.config import base
from mkdocs.config import config_options as c
from mkdocs.plugins import BasePlugin

from .plugin import version_check
from .transformer import MathTransform

if TYPE_CHECKING:
    from mkdocs.config.defaults import MkDocsConfig
    from mkdocs.structure.pages import Page

MKDOCS_COMPATIBILITY = ">=1.5"

# MkDocs shows records of the mkdocs.plugins.* loggers in its build output
log = logging.getLogger("mkdocs.plugins.mathpress")


class MathPressConfig(base.Config):
    output = c.Type(str, default="svg")
    extension = c.Type(str, default=".html")
    assistive_mml = c.Type(bool, default=True)
    tex = c.Type(dict, default={})
    svg = c.Type(dict, default={})
    chtml = c.Type(dict, default={})
    document = c.Type(dict, default={})


class MathPressPlugin(BasePlugin[MathPressConfig]):
    def __init__(self) -> None:
        self.transform: MathTransform | None = None

    def on_config(self, config: MkDocsConfig) -> MkDocsConfig | None:
        try:
            version_check(mkdocs.__version__, MKDOCS_COMPATIBILITY)
        except ValueError as exc:
            log.warning("%s; continuing the build.", exc)
        self.transform = MathTransform(dict(self.config))
        return config

    def on_post_page(self, output: str, page: Page, config: MkDocsConfig) -> str | None:
        if self.transform is None:
            return output
        return self.transform(output, page.file.dest_path)

    def on_post_template(
        self, output_content: str, template_name: str, config: MkDocsConfig
    ) -> str | None:
        if self.transform is None:
            return output_content
        return self.transform(output_content, template_name)

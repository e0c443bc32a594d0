"""
The build-time content transform.

A MathTransform is built once per site build.  It holds the resolved
configuration, the TeX input and the output renderer; everything that
depends on a single page lives in a MathDocument created per call.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .config import Config, resolve_config
from .document import MathDocument
from .renderers import get_renderer
from .tex import TexInput

Options = Union[Config, Mapping[str, Any], str, Path, None]


class MathTransform:
    """
    Callable ``(content, output_path) -> str`` rewriting math in HTML pages.

    Args:
        options: a Config, a mapping of overrides, a YAML file path or None
            for the defaults.

    Raises:
        TypeError: the configured output mode is not supported.
        ValueError: ``svg.font_cache`` is not one of global, local, none.
    """

    def __init__(self, options: Options = None) -> None:
        self.config = resolve_config(options)
        self.output = get_renderer(self.config)
        self.input = TexInput(self.config.tex)

    def __call__(self, content: str, output_path: Optional[Union[str, os.PathLike]]) -> str:
        if not self.handles(output_path):
            return content
        return self.typeset(content)

    def handles(self, output_path: Optional[Union[str, os.PathLike]]) -> bool:
        """True when ``output_path`` ends in the configured extension."""
        if not output_path:
            return False
        return os.fspath(output_path).endswith(self.config.extension)

    def typeset(self, content: str) -> str:
        """Typeset every math item in an HTML page and return the new page."""
        document = self.render(content)
        return document.serialize()

    def render(self, content: str) -> MathDocument:
        """Typeset a page and return the document before serialization."""
        document = MathDocument(content, self.input, self.output, self.config.document)
        document.render()
        document.add_stylesheet()
        if not document.math:
            self.output.remove_unused(document)
        return document

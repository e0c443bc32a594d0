"""
Output renderers for the supported output modes.
"""
from __future__ import annotations

from ..config import Config
from .base import OutputRenderer
from .chtml_renderer import ChtmlRenderer
from .mathml_renderer import MathmlRenderer
from .svg_renderer import SvgRenderer


_RENDERERS: dict[str, type[OutputRenderer]] = {
    "svg": SvgRenderer,
    "chtml": ChtmlRenderer,
    "mathml": MathmlRenderer,
}


def get_renderer(config: Config) -> OutputRenderer:
    """Build the renderer for ``config.output``; unknown modes raise TypeError."""
    if config.output not in _RENDERERS:
        raise TypeError(
            f"Unsupported output format: {config.output!r}. Supported: {list(_RENDERERS.keys())}"
        )
    return _RENDERERS[config.output](config)


def list_outputs() -> list[str]:
    """Return list of supported output mode names."""
    return list(_RENDERERS.keys())


__all__ = ["OutputRenderer", "get_renderer", "list_outputs"]

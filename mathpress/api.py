"""Programmatic API for typesetting HTML outside a site build."""
from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .config import Config
from .renderers import list_outputs
from .transformer import MathTransform


def typeset(
    content: str,
    *,
    config: Config | Mapping[str, Any] | str | Path | None = None,
) -> str:
    """Typeset every math item in an HTML page.

    Args:
        content: HTML page or fragment.
        config: Configuration as one of:
            - ``None`` (use defaults)
            - ``Config`` instance
            - dict-like mapping using the same schema as ``mathpress.yaml``
            - path to a YAML config file

    Returns:
        The page with math replaced by the configured output.
    """
    return MathTransform(config).typeset(content)


def transform(
    content: str,
    output_path: str | os.PathLike | None,
    *,
    config: Config | Mapping[str, Any] | str | Path | None = None,
) -> str:
    """Run the site transform once: pages not ending in the extension come back unchanged."""
    return MathTransform(config)(content, output_path)


def supported_outputs() -> list[str]:
    """Return supported output mode names."""
    return list_outputs()

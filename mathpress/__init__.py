from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .api import supported_outputs, transform, typeset
from .config import ChtmlConfig, Config, DocumentConfig, SvgConfig, TexConfig
from .plugin import register
from .tex import MathRenderError
from .transformer import MathTransform

try:
    __version__ = version("mathpress")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "ChtmlConfig",
    "Config",
    "DocumentConfig",
    "MathRenderError",
    "MathTransform",
    "SvgConfig",
    "TexConfig",
    "register",
    "supported_outputs",
    "transform",
    "typeset",
]

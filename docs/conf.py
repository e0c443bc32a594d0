from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as pkg_version

project = "mathpress"
author = "mathpress contributors"

try:
    release = pkg_version("mathpress")
except PackageNotFoundError:
    release = "0.0.0"
version = release

extensions = [
    "myst_parser",
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
]

templates_path = ["_templates"]
root_doc = "index"
exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]

myst_enable_extensions = [
    "colon_fence",
    "deflist",
    "dollarmath",
]

autodoc_mock_imports = ["mkdocs"]

html_theme = "furo"
html_static_path: list[str] = []

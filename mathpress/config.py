from __future__ import annotations

import yaml
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

ALL_PACKAGES = ("base", "ams", "configmacros", "noerrors")


@dataclass
class TexConfig:
    """Options for the TeX input: packages, delimiters and macros."""

    packages: list[str] = field(default_factory=lambda: list(ALL_PACKAGES))
    inline_math: list[list[str]] = field(
        default_factory=lambda: [["$", "$"], ["\\(", "\\)"]]
    )
    display_math: list[list[str]] = field(
        default_factory=lambda: [["$$", "$$"], ["\\[", "\\]"]]
    )
    process_escapes: bool = True  # \$ in text becomes a literal dollar sign
    process_environments: bool = True  # \begin{env}...\end{env} is display math
    macros: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class SvgConfig:
    """Options for vector-graphics output."""

    font_cache: str = "global"  # global | local | none
    fontset: str = "cm"  # matplotlib mathtext fontset
    font_size: float = 10.0  # layout size in points; output is sized in em
    scale: float = 1.0
    display_align: str = "center"
    display_indent: str = "0"
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class ChtmlConfig:
    """Options for styled-HTML output."""

    scale: float = 1.0
    font_family: str = '"Latin Modern Math", "STIX Two Math", "Cambria Math", serif'
    display_align: str = "center"
    display_indent: str = "0"
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class DocumentConfig:
    """Options for parsing pages and deciding where math is searched for."""

    parser: str = "html.parser"  # BeautifulSoup tree builder
    skip_html_tags: list[str] = field(
        default_factory=lambda: [
            "script",
            "noscript",
            "style",
            "textarea",
            "pre",
            "code",
            "annotation",
            "annotation-xml",
        ]
    )
    ignore_html_class: str = "mathjax_ignore"
    process_html_class: str = "mathjax_process"
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Config:
    """Top-level configuration aggregating input, output and document settings."""

    output: str = "svg"  # svg | chtml | mathml
    extension: str = ".html"  # only output paths ending in this are processed
    assistive_mml: bool = True  # hidden MathML copy next to SVG/CHTML output
    tex: TexConfig = field(default_factory=TexConfig)
    svg: SvgConfig = field(default_factory=SvgConfig)
    chtml: ChtmlConfig = field(default_factory=ChtmlConfig)
    document: DocumentConfig = field(default_factory=DocumentConfig)
    extra: dict[str, Any] = field(default_factory=dict)


_GROUP_TYPES: dict[str, type] = {
    "tex": TexConfig,
    "svg": SvgConfig,
    "chtml": ChtmlConfig,
    "document": DocumentConfig,
}


def load_config(path: Optional[Path]) -> Config:
    """Load configuration from a YAML file, returning defaults if *path* is None or missing."""
    if path is None or not path.exists():
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, Mapping):
        raise TypeError(f"Configuration file must contain a mapping: {path}")
    return load_config_from_dict(data)


def load_config_from_dict(data: Mapping[str, Any]) -> Config:
    """Build a complete Config from a partial mapping over the defaults."""
    return merge_config(Config(), data)


def merge_config(config: Config, overrides: Mapping[str, Any]) -> Config:
    """
    Return a new Config with *overrides* applied on top of *config*.

    Option groups (``tex``, ``svg``, ``chtml``, ``document``) are merged one
    level deep: a key given for a group replaces that key only, every other key
    of the group keeps its current value.  Keys that are not recognized are
    kept in the ``extra`` mapping of the level they appear at.
    """
    top = _field_values(config)
    for key, value in overrides.items():
        if key in _GROUP_TYPES:
            top[key] = _merge_group(getattr(config, key), value)
        elif key == "extra":
            top["extra"] = {**top["extra"], **(value or {})}
        elif key in top:
            top[key] = value
        else:
            top["extra"] = {**top["extra"], key: value}
    return Config(**top)


def resolve_config(options: Config | Mapping[str, Any] | str | Path | None) -> Config:
    """Turn any accepted configuration form into a complete Config."""
    if options is None:
        return Config()
    if isinstance(options, Config):
        return options
    if isinstance(options, Mapping):
        return load_config_from_dict(options)
    if isinstance(options, (str, Path)):
        return load_config(Path(options))
    raise TypeError(
        "options must be None, Config, dict-like mapping, or a config file path."
    )


def _merge_group(current: Any, overrides: Any) -> Any:
    if overrides is None:
        return current
    if not isinstance(overrides, Mapping):
        raise TypeError(
            f"Option group '{type(current).__name__}' must be a mapping, "
            f"got {type(overrides).__name__}"
        )
    values = _field_values(current)
    extra = dict(values["extra"])
    for key, value in overrides.items():
        if key == "extra":
            extra.update(value or {})
        elif key in values:
            values[key] = value
        else:
            extra[key] = value
    values["extra"] = extra
    return type(current)(**values)


def _field_values(obj: Any) -> dict[str, Any]:
    return {f.name: getattr(obj, f.name) for f in fields(obj)}

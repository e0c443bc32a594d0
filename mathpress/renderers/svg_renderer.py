"""
Render TeX rows to inline SVG with matplotlib's mathtext engine.

Pipeline for each row
---------------------
1. Lay the row out with ``mathtext.math_to_image`` into an SVG document
   (glyphs as paths, transparent figure).
2. Cut the document down for inline use: drop the XML prolog, metadata,
   matplotlib's global ``*`` style and its figure ids; paint black as
   ``currentColor``; size the root in em with the baseline depth as
   ``vertical-align``.
3. Place glyph definitions according to ``font_cache``:
     global  one hidden ``<svg id="MJX-SVG-global-cache">`` per page
     local   ``<defs>`` inside each SVG, ids prefixed ``MJX-<n>-``
     none    each ``<use>`` replaced by the glyph path itself
"""
from __future__ import annotations

import io
import re
from typing import TYPE_CHECKING

from matplotlib import mathtext, rc_context
from matplotlib.font_manager import FontProperties

from ..config import Config
from ..tex import MathItem, MathRenderError
from .base import ASSISTIVE_MML_CSS, OutputRenderer

if TYPE_CHECKING:
    from ..document import MathDocument

GLOBAL_CACHE_ID = "MJX-SVG-global-cache"
SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

_FONT_CACHES = ("global", "local", "none")

_PROLOG_RE = re.compile(r"^.*?(?=<svg\b)", re.DOTALL)
_METADATA_RE = re.compile(r"<metadata>.*?</metadata>\s*", re.DOTALL)
_STYLE_DEFS_RE = re.compile(r"<defs>\s*<style\b[^>]*>.*?</style>\s*</defs>\s*", re.DOTALL)
_FIGURE_ID_RE = re.compile(r'\s+id="(?:figure|patch|text|axes)_\d+"')
_BLACK_RE = re.compile(r"\b(fill|stroke):\s*#000000")
_DEFS_RE = re.compile(r"<defs>(.*?)</defs>\s*", re.DOTALL)
_ROOT_RE = re.compile(r"<svg\b([^>]*)>", re.DOTALL)
_GLYPH_RE = re.compile(r"<path\b([^>]*?)/>", re.DOTALL)
_USE_RE = re.compile(r"<use\b([^>]*?)/>", re.DOTALL)
_ATTR_RE = re.compile(r'([\w:.-]+)="([^"]*)"')
_BETWEEN_TAGS_RE = re.compile(r">\s+<")


class SvgRenderer(OutputRenderer):
    """Vector-graphics output."""

    jax = "SVG"
    style_id = "MJX-SVG-styles"

    def __init__(self, config: Config) -> None:
        super().__init__(config)
        self.options = config.svg
        if self.options.font_cache not in _FONT_CACHES:
            raise ValueError(
                f"Unsupported font cache '{self.options.font_cache}'. "
                f"Supported: {', '.join(_FONT_CACHES)}"
            )
        self._rc = {
            "mathtext.fontset": self.options.fontset,
            "svg.fonttype": "path",
            "svg.hashsalt": "mathpress",
            "savefig.transparent": True,
        }

    @property
    def name(self) -> str:
        return "svg"

    def typeset(self, item: MathItem, document: MathDocument) -> str:
        svgs = [self._render_row(row, document) for row in item.rows]
        if len(svgs) == 1:
            return self._container(item, svgs[0])
        return self._container(item, "".join(f"<mjx-row>{svg}</mjx-row>" for svg in svgs))

    def stylesheet(self) -> str:
        o = self.options
        return (
            f'mjx-container[jax="SVG"] {{ direction: ltr; font-size: {o.scale * 100:g}%; }}\n'
            'mjx-container[jax="SVG"] > svg { overflow: visible; min-height: 1px; min-width: 1px; }\n'
            f'mjx-container[jax="SVG"][display="true"] {{ display: block; '
            f"text-align: {o.display_align}; margin: 1em 0; "
            f"padding-left: {o.display_indent}; }}\n"
            'mjx-container[jax="SVG"] mjx-row { display: block; }\n'
            + ASSISTIVE_MML_CSS
        )

    def finalize(self, document: MathDocument) -> None:
        if self.options.font_cache != "global":
            return
        defs = "".join(document.global_cache.values())
        document.append_to_body(
            "svg",
            {"id": GLOBAL_CACHE_ID, "style": "display: none;", "xmlns": SVG_NS},
            f"<defs>{defs}</defs>",
        )

    def remove_unused(self, document: MathDocument) -> None:
        super().remove_unused(document)
        document.remove_element(GLOBAL_CACHE_ID)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_row(self, tex: str, document: MathDocument) -> str:
        svg, depth = self._mathtext_svg(tex)
        return self._inline_svg(svg, depth, document)

    def _mathtext_svg(self, tex: str) -> tuple[str, float]:
        """Lay out one row; return the SVG document and the baseline depth in points."""
        buf = io.StringIO()
        prop = FontProperties(size=self.options.font_size)
        try:
            with rc_context(self._rc):
                depth = mathtext.math_to_image(f"${tex}$", buf, prop=prop, dpi=72, format="svg")
        except ValueError as exc:
            raise MathRenderError(f"Cannot typeset {tex!r}: {exc}") from exc
        return buf.getvalue(), depth or 0.0

    def _inline_svg(self, svg: str, depth: float, document: MathDocument) -> str:
        svg = _PROLOG_RE.sub("", svg, count=1)
        svg = _METADATA_RE.sub("", svg)
        svg = _STYLE_DEFS_RE.sub("", svg)
        svg = _FIGURE_ID_RE.sub("", svg)
        svg = _BLACK_RE.sub(r"\1: currentColor", svg)

        glyphs: dict[str, dict[str, str]] = {}
        svg = _DEFS_RE.sub(lambda m: _take_glyphs(m.group(1), glyphs), svg)
        svg = _ROOT_RE.sub(lambda m: self._root_tag(m.group(1), depth), svg, count=1)

        cache = self.options.font_cache
        if cache == "none":
            svg = _USE_RE.sub(lambda m: _inline_use(m.group(1), glyphs), svg)
        else:
            prefix = "MJX-" if cache == "global" else f"MJX-{document.next_id()}-"
            svg = _USE_RE.sub(lambda m: _relink_use(m.group(1), prefix), svg)
            paths = {prefix + gid: _element("path", {"id": prefix + gid, **attrs})
                     for gid, attrs in glyphs.items()}
            if cache == "global":
                for gid, path in paths.items():
                    document.global_cache.setdefault(gid, path)
            elif paths:
                defs = "<defs>" + "".join(paths.values()) + "</defs>"
                svg = _ROOT_RE.sub(lambda m: m.group(0) + defs, svg, count=1)

        return _BETWEEN_TAGS_RE.sub("><", svg).strip()

    def _root_tag(self, raw_attrs: str, depth: float) -> str:
        attrs = dict(_ATTR_RE.findall(raw_attrs))
        size = self.options.font_size
        root = {
            "xmlns": SVG_NS,
            "xmlns:xlink": XLINK_NS,
            "style": f"vertical-align: {-depth / size:.3f}em",
        }
        for dim in ("width", "height"):
            if dim in attrs:
                root[dim] = f"{_points(attrs[dim]) / size:.3f}em"
        root["role"] = "img"
        root["focusable"] = "false"
        if "viewBox" in attrs:
            root["viewBox"] = attrs["viewBox"]
        root["fill"] = "currentColor"
        if self.assistive_mml:
            root["aria-hidden"] = "true"
        return "<svg" + "".join(f' {k}="{v}"' for k, v in root.items()) + ">"


# ---------------------------------------------------------------------------
# Glyph helpers
# ---------------------------------------------------------------------------


def _points(value: str) -> float:
    return float(value.strip().removesuffix("pt"))


def _element(tag: str, attrs: dict[str, str]) -> str:
    if "d" in attrs:
        attrs = {**attrs, "d": " ".join(attrs["d"].split())}
    return f"<{tag}" + "".join(f' {k}="{v}"' for k, v in attrs.items()) + "/>"


def _take_glyphs(defs_body: str, glyphs: dict[str, dict[str, str]]) -> str:
    """Move glyph paths out of a ``<defs>`` body; keep whatever else it holds."""

    def _take(m: re.Match[str]) -> str:
        attrs = dict(_ATTR_RE.findall(m.group(1)))
        gid = attrs.pop("id", None)
        if gid is None:
            return m.group(0)
        glyphs[gid] = attrs
        return ""

    rest = _GLYPH_RE.sub(_take, defs_body)
    return f"<defs>{rest}</defs>" if rest.strip() else ""


def _href_key(attrs: dict[str, str]) -> str | None:
    for key in ("xlink:href", "href"):
        if key in attrs:
            return key
    return None


def _relink_use(raw_attrs: str, prefix: str) -> str:
    attrs = dict(_ATTR_RE.findall(raw_attrs))
    key = _href_key(attrs)
    if key is not None and attrs[key].startswith("#"):
        attrs[key] = "#" + prefix + attrs[key][1:]
    return _element("use", attrs)


def _inline_use(raw_attrs: str, glyphs: dict[str, dict[str, str]]) -> str:
    """Replace a ``<use>`` of a known glyph with the glyph path, transforms composed."""
    attrs = dict(_ATTR_RE.findall(raw_attrs))
    key = _href_key(attrs)
    glyph = glyphs.get(attrs.pop(key)[1:]) if key is not None else None
    if glyph is None:
        return "<use" + raw_attrs + "/>"

    transforms = [attrs.pop("transform", "")]
    x, y = attrs.pop("x", None), attrs.pop("y", None)
    if x or y:
        transforms.append(f"translate({x or 0} {y or 0})")
    transforms.append(glyph.get("transform", ""))

    path = {"d": glyph["d"]}
    transform = " ".join(t for t in transforms if t)
    if transform:
        path["transform"] = transform
    path.update(attrs)
    return _element("path", path)

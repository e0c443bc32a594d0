"""
Render TeX rows as styled HTML text.

Pipeline for each row:
  1. Escape HTML special characters in the TeX source
  2. Expand \\frac{num}{den} → (num)/(den)  (handles nested braces)
  3. Convert known commands to Unicode via unicodeit
  4. Convert any remaining ^{...} / _{...} to Unicode superscripts/subscripts,
     falling back to <sup>/<sub> tags when the characters have no Unicode form
  5. Strip leftover bare braces
  6. Wrap single-letter Latin variables and Greek letters in <mjx-i>
"""
from __future__ import annotations

import html
import re
from typing import TYPE_CHECKING

import unicodeit

from ..config import Config
from ..tex import MathItem, _brace_arg
from .base import ASSISTIVE_MML_CSS, OutputRenderer

if TYPE_CHECKING:
    from ..document import MathDocument

_SUPERSCRIPT: dict[str, str] = {
    "0": "⁰", "1": "¹", "2": "²", "3": "³", "4": "⁴",
    "5": "⁵", "6": "⁶", "7": "⁷", "8": "⁸", "9": "⁹",
    "+": "⁺", "-": "⁻", "=": "⁼", "(": "⁽", ")": "⁾",
    "a": "ᵃ", "b": "ᵇ", "c": "ᶜ", "d": "ᵈ", "e": "ᵉ",
    "f": "ᶠ", "g": "ᵍ", "h": "ʰ", "i": "ⁱ", "j": "ʲ",
    "k": "ᵏ", "l": "ˡ", "m": "ᵐ", "n": "ⁿ", "o": "ᵒ",
    "p": "ᵖ", "r": "ʳ", "s": "ˢ", "t": "ᵗ", "u": "ᵘ",
    "v": "ᵛ", "w": "ʷ", "x": "ˣ", "y": "ʸ", "z": "ᶻ",
}

_SUBSCRIPT: dict[str, str] = {
    "0": "₀", "1": "₁", "2": "₂", "3": "₃", "4": "₄",
    "5": "₅", "6": "₆", "7": "₇", "8": "₈", "9": "₉",
    "+": "₊", "-": "₋", "=": "₌", "(": "₍", ")": "₎",
    "a": "ₐ", "e": "ₑ", "h": "ₕ", "k": "ₖ", "l": "ₗ",
    "m": "ₘ", "n": "ₙ", "o": "ₒ", "p": "ₚ", "s": "ₛ",
    "t": "ₜ", "x": "ₓ",
}

# Greek letters (and math-variant forms) that TeX italicises in math mode
_GREEK = (
    "αβγδεζηθικλμνξοπρστυφχψω"
    "ΑΒΓΔΕΖΗΘΙΚΛΜΝΞΟΠΡΣΤΥΦΧΨΩ"
    "ϕϵϑϱϖϰ"
)

_HTML_TAG_RE = re.compile(r"<[^>]+>")
_ENTITY_RE = re.compile(r"&[a-z]+;|&#x?[0-9a-fA-F]+;")


class ChtmlRenderer(OutputRenderer):
    """Styled-HTML output."""

    jax = "CHTML"
    style_id = "MJX-CHTML-styles"

    def __init__(self, config: Config) -> None:
        super().__init__(config)
        self.options = config.chtml

    @property
    def name(self) -> str:
        return "chtml"

    def typeset(self, item: MathItem, document: MathDocument) -> str:
        rows = [row_to_html(row) for row in item.rows]
        hidden = ' aria-hidden="true"' if self.assistive_mml else ""
        if len(rows) == 1:
            body = rows[0]
        else:
            body = "".join(f"<mjx-row>{row}</mjx-row>" for row in rows)
        return self._container(item, f'<mjx-math class="MJX-TEX"{hidden}>{body}</mjx-math>')

    def stylesheet(self) -> str:
        o = self.options
        return (
            'mjx-container[jax="CHTML"] { line-height: 0; }\n'
            f'mjx-container[jax="CHTML"] mjx-math {{ display: inline-block; '
            f"line-height: normal; white-space: nowrap; font-style: normal; "
            f"font-family: {o.font_family}; font-size: {o.scale * 100:g}%; }}\n"
            'mjx-container[jax="CHTML"] mjx-i { font-style: italic; }\n'
            f'mjx-container[jax="CHTML"][display="true"] {{ display: block; '
            f"text-align: {o.display_align}; margin: 1em 0; "
            f"padding-left: {o.display_indent}; }}\n"
            'mjx-container[jax="CHTML"] mjx-row { display: block; }\n'
            + ASSISTIVE_MML_CSS
        )


def row_to_html(tex: str) -> str:
    """Convert one row of TeX to Unicode text with light HTML markup."""
    text = html.escape(tex, quote=False)
    text = _expand_frac(text)
    result = unicodeit.replace(text)
    result = _expand_scripts(result)
    result = result.replace("{", "").replace("}", "")
    return _italicize(result)


# ---------------------------------------------------------------------------
# \frac expansion (brace-depth aware)
# ---------------------------------------------------------------------------


def _expand_frac(latex: str) -> str:
    """Replace \\frac{num}{den} with (num)/(den)."""
    result: list[str] = []
    i = 0
    while i < len(latex):
        if latex[i : i + 5] == r"\frac":
            num, i = _brace_arg(latex, i + 5)
            den, i = _brace_arg(latex, i)
            result.append(f"({num})/({den})")
        else:
            result.append(latex[i])
            i += 1
    return "".join(result)


# ---------------------------------------------------------------------------
# superscript / subscript expansion
# ---------------------------------------------------------------------------


def _script_html(inner: str, table: dict[str, str], tag: str) -> str:
    """Map inner to Unicode script chars; fall back to an HTML tag."""
    mapped = inner.translate(str.maketrans(table))
    if mapped != inner and all(
        mapped[j] != inner[j] for j in range(len(inner)) if inner[j].strip()
    ):
        return mapped
    return f"<{tag}>{inner}</{tag}>"


def _expand_scripts(text: str) -> str:
    """Convert remaining ^{...} and _{...} to Unicode or <sup>/<sub>."""
    text = re.sub(
        r"\^\{([^}]*)\}",
        lambda m: _script_html(m.group(1), _SUPERSCRIPT, "sup"),
        text,
    )
    text = re.sub(
        r"_\{([^}]*)\}",
        lambda m: _script_html(m.group(1), _SUBSCRIPT, "sub"),
        text,
    )
    # Bare ^x / _x (single character, no braces)
    text = re.sub(r"\^([^\s{])", lambda m: _script_html(m.group(1), _SUPERSCRIPT, "sup"), text)
    text = re.sub(r"_([^\s{])", lambda m: _script_html(m.group(1), _SUBSCRIPT, "sub"), text)
    return text


# ---------------------------------------------------------------------------
# italic variables
# ---------------------------------------------------------------------------


def _italicize(text: str) -> str:
    """Wrap single-letter Latin variables and Greek letters in <mjx-i>."""
    parts = _HTML_TAG_RE.split(text)
    tags = _HTML_TAG_RE.findall(text)
    processed: list[str] = []
    for k, part in enumerate(parts):
        processed.append(_italicize_text(part))
        if k < len(tags):
            processed.append(tags[k])
    return "".join(processed)


def _italicize_text(part: str) -> str:
    # Entities such as &lt; are kept whole
    pieces = _ENTITY_RE.split(part)
    entities = _ENTITY_RE.findall(part)
    out: list[str] = []
    for k, piece in enumerate(pieces):
        piece = re.sub(r"(?<![A-Za-z])([A-Za-z])(?![A-Za-z])", r"<mjx-i>\1</mjx-i>", piece)
        piece = re.sub(f"[{_GREEK}]", lambda m: f"<mjx-i>{m.group(0)}</mjx-i>", piece)
        out.append(piece)
        if k < len(entities):
            out.append(entities[k])
    return "".join(out)

from __future__ import annotations

import re

import latex2mathml.converter

from ..tex import MathRenderError

MATHML_NS = "http://www.w3.org/1998/Math/MathML"

_MATH_TAG_RE = re.compile(r"^\s*<math\b[^>]*>(.*)</math>\s*$", re.DOTALL)


def tex_to_mathml(rows: list[str], display: bool) -> str:
    """Convert TeX rows to one ``<math>`` element; several rows become an ``<mtable>``."""
    mode = "block" if display else "inline"
    try:
        if len(rows) == 1:
            return latex2mathml.converter.convert(rows[0], display=mode)
        cells = "".join(
            f"<mtr><mtd>{_inner(latex2mathml.converter.convert(row))}</mtd></mtr>"
            for row in rows
        )
    except Exception as exc:
        # latex2mathml has no common base class for its parse errors.
        raise MathRenderError(f"Cannot convert TeX to MathML: {exc}") from exc
    return f'<math xmlns="{MATHML_NS}" display="{mode}"><mtable>{cells}</mtable></math>'


def _inner(mathml: str) -> str:
    m = _MATH_TAG_RE.match(mathml)
    return m.group(1) if m else mathml

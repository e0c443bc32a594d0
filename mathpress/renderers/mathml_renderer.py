"""
MathML output: latex2mathml ``<math>`` elements spliced into the page.

Browsers and screen readers handle MathML natively, so this mode adds no
stylesheet and no assistive copy.
"""
from __future__ import annotations

import html
from typing import TYPE_CHECKING

from ..tex import MathItem
from ._mathml import MATHML_NS, tex_to_mathml
from .base import OutputRenderer

if TYPE_CHECKING:
    from ..document import MathDocument


class MathmlRenderer(OutputRenderer):
    """Native MathML output."""

    @property
    def name(self) -> str:
        return "mathml"

    def typeset(self, item: MathItem, document: MathDocument) -> str:
        return tex_to_mathml(item.rows, item.display)

    def typeset_error(self, item: MathItem, exc: Exception) -> str:
        display = "block" if item.display else "inline"
        return (
            f'<math xmlns="{MATHML_NS}" display="{display}">'
            f'<merror title="{html.escape(str(exc), quote=True)}">'
            f"<mtext>{html.escape(item.source)}</mtext></merror></math>"
        )

    def remove_unused(self, document: MathDocument) -> None:
        pass

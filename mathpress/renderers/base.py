"""
Abstract base class for output renderers.
"""
from __future__ import annotations

import html
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..config import Config
from ..tex import MathItem
from ._mathml import tex_to_mathml

if TYPE_CHECKING:
    from ..document import MathDocument

# Visually hide the assistive MathML copy while keeping it in the accessibility tree.
ASSISTIVE_MML_CSS = """\
mjx-container[jax] { position: relative; }
mjx-assistive-mml {
  position: absolute !important;
  top: 0px;
  left: 0px;
  clip: rect(1px, 1px, 1px, 1px);
  padding: 1px 0px 0px 0px !important;
  border: 0px !important;
  display: block !important;
  width: auto !important;
  overflow: hidden !important;
  user-select: none;
}
mjx-assistive-mml[display="block"] { width: 100% !important; }
mjx-merror {
  display: inline-block;
  color: red;
  background-color: yellow;
}
"""


class OutputRenderer(ABC):
    """
    Base class for output renderers.

    A renderer turns compiled MathItems into markup, contributes the global
    stylesheet for its mode, and knows which of its page-level additions are
    unused when a page holds no math.
    """

    jax: str = ""
    style_id: str | None = None

    def __init__(self, config: Config) -> None:
        self.assistive_mml = config.assistive_mml

    @property
    @abstractmethod
    def name(self) -> str:
        """Output mode name as used in the configuration."""
        pass

    @abstractmethod
    def typeset(self, item: MathItem, document: MathDocument) -> str:
        """
        Render one compiled math item.

        Args:
            item: MathItem with ``rows`` filled in by the TeX input
            document: the page being rendered, for page-level state

        Returns:
            Markup that replaces the item's source text
        """
        pass

    def typeset_error(self, item: MathItem, exc: Exception) -> str:
        """Render an item that failed to typeset as an error box showing its source."""
        message = html.escape(str(exc), quote=True)
        body = (
            f'<mjx-merror data-mjx-error="{message}" title="{message}">'
            f"{html.escape(item.source)}</mjx-merror>"
        )
        return self._container(item, body, assistive=False)

    def stylesheet(self) -> str | None:
        """CSS attached to the page head, or None when the mode needs none."""
        return None

    def finalize(self, document: MathDocument) -> None:
        """Add page-level elements after every item has been typeset."""
        pass

    def remove_unused(self, document: MathDocument) -> None:
        """Drop page-level additions from a page that turned out to hold no math."""
        document.remove_stylesheet()

    # ---- shared markup helpers ------------------------------------------

    def _container(self, item: MathItem, body: str, *, assistive: bool = True) -> str:
        attrs = f'class="MathJax" jax="{self.jax}"'
        if item.display:
            attrs += ' display="true"'
        mml = self._assistive_mml(item) if assistive and self.assistive_mml else ""
        return f"<mjx-container {attrs}>{body}{mml}</mjx-container>"

    @staticmethod
    def _assistive_mml(item: MathItem) -> str:
        display = "block" if item.display else "inline"
        mathml = tex_to_mathml(item.rows, item.display)
        return f'<mjx-assistive-mml unselectable="on" display="{display}">{mathml}</mjx-assistive-mml>'

"""
A parsed HTML page on its way through the typesetting engines.

The page is parsed with BeautifulSoup.  Math is searched for in the text
of ``<body>``, where sibling text separated only by ``<br>``, ``<wbr>`` or
comments is read as one run.  Each math item becomes a placeholder token
in the text, and rendered markup is swapped in for the tokens after
serialization, so engine output reaches the page byte for byte.
"""
from __future__ import annotations

import re
from itertools import chain
from typing import Iterator

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.dammit import EntitySubstitution
from bs4.element import Comment, PageElement, PreformattedString
from bs4.formatter import HTMLFormatter

from .config import DocumentConfig
from .renderers.base import OutputRenderer
from .tex import MathItem, MathRenderError, TexInput

_TOKEN = "\x00MATH{}\x00"
_TOKEN_RE = re.compile("\x00MATH(\\d+)\x00")

# Already typeset math is never searched again
_TYPESET_TAGS = frozenset({"mjx-container", "math", "svg"})

# Tags whose text joins the surrounding text when looking for delimiters
_JOIN_TAGS = {"br": "\n", "wbr": ""}

# Minimal entity substitution; void elements written the HTML way (<br>).
_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)


class MathDocument:
    """One page: its parse tree, the math found in it, and page-level render state."""

    def __init__(
        self,
        content: str,
        tex_input: TexInput,
        output: OutputRenderer,
        config: DocumentConfig,
    ) -> None:
        self.soup = BeautifulSoup(content, config.parser)
        self.input = tex_input
        self.output = output
        self.config = config
        self.math: list[MathItem] = []
        self.global_cache: dict[str, str] = {}  # glyph id -> definition markup
        self.styles: Tag | None = None
        self._skip_tags = frozenset(config.skip_html_tags)
        self._markup: list[str] = []
        self._ids = 0

    def render(self) -> MathDocument:
        """Find and typeset every math item, then let the renderer add page-level elements."""
        for run in self._text_runs():
            self._typeset_run(run)
        self.output.finalize(self)
        return self

    def next_id(self) -> int:
        """Return a page-unique counter value, starting at 1."""
        self._ids += 1
        return self._ids

    # ------------------------------------------------------------------
    # Page-level elements
    # ------------------------------------------------------------------

    def add_stylesheet(self) -> Tag | None:
        """Append the renderer's stylesheet to ``<head>``; None when the mode has none."""
        css = self.output.stylesheet()
        if css is None:
            return None
        style = self.soup.new_tag("style", attrs={"id": self.output.style_id})
        style.string = css
        if self.soup.head is not None:
            self.soup.head.append(style)
        else:
            self._root().insert(0, style)
        self.styles = style
        return style

    def remove_stylesheet(self) -> None:
        if self.styles is not None:
            self.styles.decompose()
            self.styles = None

    def append_to_body(self, name: str, attrs: dict[str, str], inner_markup: str) -> Tag:
        """Append an element whose content is raw markup to the end of ``<body>``."""
        tag = self.soup.new_tag(name, attrs=attrs)
        tag.append(NavigableString(self._stash(inner_markup)))
        (self.soup.body or self._root()).append(tag)
        return tag

    def remove_element(self, element_id: str) -> None:
        element = (self.soup.body or self.soup).find(id=element_id)
        if element is not None:
            element.decompose()

    def serialize(self) -> str:
        """Return the page as HTML text with rendered math in place."""
        text = self.soup.decode(formatter=_FORMATTER)
        return _TOKEN_RE.sub(lambda m: self._markup[int(m.group(1))], text)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _root(self) -> Tag:
        return self.soup.html or self.soup

    def _searchable_strings(self) -> Iterator[NavigableString]:
        # Only the body holds math; fragments without one are searched whole.
        root = self.soup.body or self.soup
        for node in list(root.find_all(string=True)):
            # comments, doctype, CDATA and processing instructions
            if isinstance(node, PreformattedString):
                continue
            if node.parent is not None and self._is_searchable(node.parent):
                yield node

    def _text_runs(self) -> Iterator[list[PageElement]]:
        """Group sibling text with the ``<br>``, ``<wbr>`` and comments between it."""
        seen: set[int] = set()
        for node in self._searchable_strings():
            if id(node) in seen:
                continue
            run: list[PageElement] = [node]
            sibling = node.next_sibling
            while sibling is not None and _joinable(sibling):
                run.append(sibling)
                sibling = sibling.next_sibling
            while not _is_text(run[-1]):
                run.pop()
            seen.update(id(n) for n in run)
            yield run

    def _typeset_run(self, run: list[PageElement]) -> None:
        """Typeset the math in a run; items may span its members."""
        texts = [_run_text(node) for node in run]
        items = self.input.find_math("".join(texts))
        start = 0
        for node, text in zip(run, texts):
            end = start + len(text)
            if not _is_text(node):
                if any(_covers(item, start, end) for item in items):
                    node.extract()
            else:
                replacement = self._replace_text(text, start, end, items)
                if replacement != text:
                    if replacement:
                        node.replace_with(NavigableString(replacement))
                    else:
                        node.extract()
            start = end

    def _replace_text(self, text: str, start: int, end: int, items: list[MathItem]) -> str:
        parts: list[str] = []
        cursor = start
        for item in items:
            if item.end <= start or item.start >= end:
                continue
            if item.start >= start:
                parts.append(self.input.unescape(text[cursor - start:item.start - start]))
                parts.append(self._place(item))
            cursor = min(item.end, end)
        parts.append(self.input.unescape(text[cursor - start:]))
        return "".join(parts)

    def _is_searchable(self, parent: Tag) -> bool:
        """Skip tags always win; otherwise the nearest ignore/process class decides."""
        decided = None
        for tag in chain([parent], parent.parents):
            if tag.name in self._skip_tags or tag.name in _TYPESET_TAGS:
                return False
            if decided is None:
                classes = tag.get("class") or []
                if self.config.process_html_class in classes:
                    decided = True
                elif self.config.ignore_html_class in classes:
                    decided = False
        return decided is not False

    def _place(self, item: MathItem) -> str:
        markup = self._typeset(item)
        self.math.append(item)
        return self._stash(markup)

    def _typeset(self, item: MathItem) -> str:
        try:
            self.input.compile(item)
            return self.output.typeset(item, self)
        except MathRenderError as exc:
            if not self.input.noerrors:
                raise
            return self.output.typeset_error(item, exc)

    def _stash(self, markup: str) -> str:
        self._markup.append(markup)
        return _TOKEN.format(len(self._markup) - 1)


def _is_text(node: PageElement) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def _joinable(node: PageElement) -> bool:
    if isinstance(node, Tag):
        return node.name in _JOIN_TAGS
    return _is_text(node) or isinstance(node, Comment)


def _run_text(node: PageElement) -> str:
    if isinstance(node, Tag):
        return _JOIN_TAGS[node.name]
    return str(node) if _is_text(node) else ""


def _covers(item: MathItem, start: int, end: int) -> bool:
    """True when the span [start, end) lies inside the item."""
    if start == end:
        return item.start < start < item.end
    return item.start <= start and end <= item.end

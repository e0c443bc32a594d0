"""
TeX input: locate math in page text and prepare it for the output engines.

Finding math
------------
The text of a single text node is scanned for the earliest opening
delimiter (longest delimiter wins on ties), an escaped dollar sign, or a
``\\begin{env}``.  The matching close delimiter must sit at brace depth
zero; a backslash always escapes the character that follows it.  Openers
without a matching close are left in the text.

Packages
--------
base          core delimiter handling (always on)
ams           split ams display environments into rows the engines can draw
configmacros  substitute the ``macros`` option before rendering
noerrors      render failing items as an error box instead of raising
"""
from __future__ import annotations

import re
import warnings
from dataclasses import dataclass, field
from typing import Any, Union

from .config import ALL_PACKAGES, TexConfig

# Substitution limit for configmacros; a recursive macro hits this.
MAX_MACROS = 10_000

_AMS_ENVIRONMENTS = frozenset(
    {"equation", "align", "gather", "multline", "eqnarray", "flalign", "alignat"}
)
_ENV_RE = re.compile(
    r"^\\begin\{(?P<name>[^}]+)\}(?:\{[^}]*\})?(?P<body>.*)\\end\{(?P=name)\}$",
    re.DOTALL,
)
_ROW_SPLIT_RE = re.compile(r"\\\\(?:\[[^\]]*\])?")
_ROW_NOISE_RE = re.compile(
    r"(?<!\\)\\(?:label|tag\*?)\{[^}]*\}|(?<!\\)\\(?:nonumber|notag)(?![A-Za-z])"
)


class MathRenderError(ValueError):
    """A math item could not be converted by the typesetting engine."""


@dataclass
class MathItem:
    """One piece of math found in a page."""

    tex: str  # TeX without delimiters (whole \begin...\end for environments)
    display: bool
    start: int  # offsets into the text node the item was found in
    end: int
    open: str = ""
    close: str = ""
    environment: str | None = None
    rows: list[str] = field(default_factory=list)  # engine-ready rows

    @property
    def source(self) -> str:
        """The item as it was written in the page."""
        return f"{self.open}{self.tex}{self.close}"


Piece = Union[str, MathItem]


class TexInput:
    """Finds TeX math in text and compiles it for the output engines."""

    def __init__(self, config: TexConfig) -> None:
        self.config = config
        self.packages = _enabled_packages(config.packages)
        self.macros = _normalize_macros(config.macros) if "configmacros" in self.packages else {}
        self._delimiters: dict[str, tuple[str, bool]] = {}
        for open_, close in config.display_math:
            self._delimiters[open_] = (close, True)
        for open_, close in config.inline_math:
            self._delimiters.setdefault(open_, (close, False))
        self._start_re = self._build_start_pattern()

    @property
    def noerrors(self) -> bool:
        return "noerrors" in self.packages

    # ------------------------------------------------------------------
    # Finding math
    # ------------------------------------------------------------------

    def split_text(self, text: str) -> list[Piece]:
        """Split *text* into literal strings and MathItems, in document order.

        Escaped dollar signs are folded into the neighbouring literal text.
        """
        pieces: list[Piece] = []
        if self._start_re is None:
            return [text] if text else []

        literal: list[str] = []
        last = 0
        pos = 0
        while True:
            m = self._start_re.search(text, pos)
            if m is None:
                break
            if m.groupdict().get("escape"):
                literal.append(text[last:m.start()] + "$")
                last = pos = m.end()
                continue
            item = self._match_item(text, m)
            if item is None:
                pos = m.start() + 1
                continue
            literal.append(text[last:item.start])
            _flush(literal, pieces)
            pieces.append(item)
            last = pos = item.end
        literal.append(text[last:])
        _flush(literal, pieces)
        return pieces

    def find_math(self, text: str) -> list[MathItem]:
        """Return the MathItems found in *text*."""
        return [piece for piece in self.split_text(text) if isinstance(piece, MathItem)]

    def unescape(self, text: str) -> str:
        """Fold escaped dollar signs in text that holds no math."""
        if not self.config.process_escapes:
            return text
        return text.replace("\\$", "$")

    def _build_start_pattern(self) -> re.Pattern[str] | None:
        parts: list[str] = []
        if self.config.process_escapes:
            parts.append(r"(?P<escape>\\\$)")
        if self.config.process_environments:
            parts.append(r"(?P<env>\\begin\{(?P<envname>[^}]+)\})")
        opens = sorted(self._delimiters, key=len, reverse=True)
        if opens:
            parts.append("(?P<open>" + "|".join(re.escape(o) for o in opens) + ")")
        if not parts:
            return None
        return re.compile("|".join(parts))

    def _match_item(self, text: str, m: re.Match[str]) -> MathItem | None:
        groups = m.groupdict()
        if groups.get("env"):
            name = groups["envname"]
            close = f"\\end{{{name}}}"
            end = _find_close(text, m.end(), close)
            if end < 0:
                return None
            stop = end + len(close)
            return MathItem(
                tex=text[m.start():stop],
                display=True,
                start=m.start(),
                end=stop,
                environment=name,
            )

        open_ = m.group("open")
        close, display = self._delimiters[open_]
        end = _find_close(text, m.end(), close)
        if end < 0 or not text[m.end():end].strip():
            return None
        return MathItem(
            tex=text[m.end():end],
            display=display,
            start=m.start(),
            end=end + len(close),
            open=open_,
            close=close,
        )

    # ------------------------------------------------------------------
    # Compiling
    # ------------------------------------------------------------------

    def compile(self, item: MathItem) -> MathItem:
        """Fill ``item.rows`` with TeX ready for the output engines."""
        tex = item.tex
        if self.macros:
            tex = expand_macros(tex, self.macros)
        rows = None
        if "ams" in self.packages and item.environment is not None:
            rows = environment_rows(tex)
        item.rows = rows if rows else [tex.strip()]
        return item


def _flush(literal: list[str], pieces: list[Piece]) -> None:
    text = "".join(literal)
    if text:
        pieces.append(text)
    literal.clear()


def _find_close(text: str, pos: int, close: str) -> int:
    """Return the index of *close* at brace depth zero after *pos*, or -1."""
    depth = 0
    i = pos
    n = len(text)
    while i < n:
        if depth == 0 and text.startswith(close, i):
            return i
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c == "{":
            depth += 1
        elif c == "}" and depth:
            depth -= 1
        i += 1
    return -1


def _enabled_packages(packages: list[str]) -> list[str]:
    enabled = ["base"]
    for name in packages:
        if name not in ALL_PACKAGES:
            warnings.warn(
                f"Unknown TeX package '{name}' ignored. Known packages: {', '.join(ALL_PACKAGES)}",
                RuntimeWarning,
                stacklevel=3,
            )
            continue
        if name not in enabled:
            enabled.append(name)
    return enabled


# ---------------------------------------------------------------------------
# configmacros
# ---------------------------------------------------------------------------


def _normalize_macros(macros: dict[str, Any]) -> dict[str, tuple[str, int]]:
    """Turn ``name -> body`` / ``name -> [body, nargs]`` into ``name -> (body, nargs)``."""
    normalized: dict[str, tuple[str, int]] = {}
    for name, definition in macros.items():
        key = name.lstrip("\\")
        if isinstance(definition, str):
            normalized[key] = (definition, 0)
        elif isinstance(definition, (list, tuple)) and definition:
            nargs = int(definition[1]) if len(definition) > 1 else 0
            normalized[key] = (str(definition[0]), nargs)
        else:
            raise ValueError(f"Invalid definition for macro '\\{key}': {definition!r}")
    return normalized


def _brace_arg(s: str, pos: int) -> tuple[str, int]:
    """Return (content, end_pos) of the brace group (or single token) at pos."""
    while pos < len(s) and s[pos] == " ":
        pos += 1
    if pos >= len(s) or s[pos] != "{":
        return (s[pos : pos + 1], pos + 1)
    depth = 0
    for i in range(pos, len(s)):
        if s[i] == "{":
            depth += 1
        elif s[i] == "}":
            depth -= 1
            if depth == 0:
                return (s[pos + 1 : i], i + 1)
    return (s[pos + 1 :], len(s))


def expand_macros(tex: str, macros: dict[str, tuple[str, int]], limit: int = MAX_MACROS) -> str:
    """Substitute configured macros in *tex*, re-scanning the substituted text."""
    if not macros:
        return tex
    names = sorted(macros, key=len, reverse=True)
    pattern = re.compile(
        r"(?<!\\)\\(" + "|".join(re.escape(n) for n in names) + r")(?![A-Za-z])"
    )
    count = 0
    pos = 0
    while True:
        m = pattern.search(tex, pos)
        if m is None:
            return tex
        count += 1
        if count > limit:
            raise MathRenderError(
                "Maximum macro substitution count exceeded; "
                "is there a recursive macro call?"
            )
        body, nargs = macros[m.group(1)]
        end = m.end()
        for n in range(1, nargs + 1):
            arg, end = _brace_arg(tex, end)
            body = body.replace(f"#{n}", arg)
        tex = tex[: m.start()] + body + tex[end:]
        pos = m.start()


# ---------------------------------------------------------------------------
# ams
# ---------------------------------------------------------------------------


def environment_rows(tex: str) -> list[str] | None:
    """Split an ams display environment into drawable rows.

    Returns None when *tex* is not one of the ams environments.  Labels, tags
    and alignment markers are dropped from the rows.
    """
    m = _ENV_RE.match(tex.strip())
    if m is None or m.group("name").rstrip("*") not in _AMS_ENVIRONMENTS:
        return None
    body = _ROW_NOISE_RE.sub("", m.group("body"))
    rows = []
    for row in _ROW_SPLIT_RE.split(body):
        row = re.sub(r"(?<!\\)&", " ", row).strip()
        if row:
            rows.append(row)
    return rows

"""
labellift/scanner.py

Flat tokeniser for SVG/XML markup.

The filter must leave every byte it does not move untouched, so instead of
building an element tree this module walks the text once and reports each
construct (tag, comment, CDATA, text, ...) with its offsets.  Callers slice
the original string with those offsets.

Only the structure needed to find element boundaries is recovered: tag
names, attributes, and whether a tag opens, closes, or is self-closing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple


# Token kinds
START = "start"        # <g ...>
END = "end"            # </g>
EMPTY = "empty"        # <g .../>
COMMENT = "comment"    # <!-- ... -->
CDATA = "cdata"        # <![CDATA[ ... ]]>
PI = "pi"              # <?xml ... ?>
DECL = "decl"          # <!DOCTYPE ...>
TEXT = "text"

# Attributes are separated by whitespace, or directly follow a quoted value
_TAG_RE = re.compile(
    r"<(?P<close>/)?(?P<name>[A-Za-z_][\w:.\-]*)"
    r"(?P<attrs>(?:(?:\s+|(?<=[\"']))[^\s=/>\"']+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s\"'=<>`]+))?)*)"
    r"\s*(?P<empty>/)?>"
)

_ATTR_RE = re.compile(
    r"(?P<name>[^\s=/>\"']+)"
    r"(?:\s*=\s*(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)'|(?P<bare>[^\s\"'=<>`]+)))?"
)


@dataclass
class Token:
    """A single markup construct located at ``text[start:end]``.

    Attributes:
        kind: One of the module-level kind constants.
        start: Offset of the first character.
        end: Offset one past the last character.
        raw: The exact source text of the token.
        name: Local tag name (namespace prefix removed) for tag tokens.
        attrs: Parsed attributes for ``START``/``EMPTY`` tokens.
    """
    kind: str
    start: int
    end: int
    raw: str
    name: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)

    @property
    def comment_body(self) -> str:
        """Text between ``<!--`` and ``-->`` (empty for other kinds)."""
        if self.kind != COMMENT:
            return ""
        body = self.raw[4:]
        return body[:-3] if body.endswith("-->") else body


def local_name(name: str) -> str:
    """Strip a namespace prefix: ``svg:g`` -> ``g``."""
    return name.rsplit(":", 1)[-1]


def parse_attributes(raw: str) -> Dict[str, str]:
    """Parse the attribute portion of a start tag.

    Handles double-quoted, single-quoted and bare values.  Attributes
    without a value map to ``""``.  The first occurrence of a repeated
    attribute wins.
    """
    attrs: Dict[str, str] = {}
    for m in _ATTR_RE.finditer(raw or ""):
        name = m.group("name")
        if name in attrs:
            continue
        for group in ("dq", "sq", "bare"):
            value = m.group(group)
            if value is not None:
                break
        else:
            value = ""
        attrs[name] = value
    return attrs


def has_class(attrs: Dict[str, str], class_name: str) -> bool:
    """Return True if *class_name* is one of the tokens of ``attrs['class']``."""
    return class_name in attrs.get("class", "").split()


def _find_end(text: str, start: int, terminator: str) -> int:
    """Offset just past *terminator*, or end of text if it never appears."""
    idx = text.find(terminator, start)
    return len(text) if idx == -1 else idx + len(terminator)


def _declaration_end(text: str, start: int) -> int:
    """End of a ``<!...>`` declaration, allowing a ``[...]`` internal subset."""
    gt = text.find(">", start)
    bracket = text.find("[", start)
    if bracket != -1 and (gt == -1 or bracket < gt):
        close = text.find("]", bracket)
        if close != -1:
            gt = text.find(">", close)
    return len(text) if gt == -1 else gt + 1


def scan(text: str) -> Iterator[Token]:
    """Yield every markup construct in *text*, in order, covering all of it.

    Unterminated comments, CDATA sections and processing instructions run
    to the end of the text.  A ``<`` that does not begin a well-formed
    construct is reported as text.
    """
    pos = 0
    n = len(text)
    while pos < n:
        lt = text.find("<", pos)
        if lt == -1:
            yield Token(TEXT, pos, n, text[pos:])
            return
        if lt > pos:
            yield Token(TEXT, pos, lt, text[pos:lt])

        if text.startswith("<!--", lt):
            end = _find_end(text, lt + 4, "-->")
            yield Token(COMMENT, lt, end, text[lt:end])
        elif text.startswith("<![CDATA[", lt):
            end = _find_end(text, lt + 9, "]]>")
            yield Token(CDATA, lt, end, text[lt:end])
        elif text.startswith("<?", lt):
            end = _find_end(text, lt + 2, "?>")
            yield Token(PI, lt, end, text[lt:end])
        elif text.startswith("<!", lt):
            end = _declaration_end(text, lt + 2)
            yield Token(DECL, lt, end, text[lt:end])
        else:
            m = _TAG_RE.match(text, lt)
            if m is None:
                yield Token(TEXT, lt, lt + 1, "<")
                end = lt + 1
            else:
                end = m.end()
                name = local_name(m.group("name"))
                if m.group("close"):
                    yield Token(END, lt, end, m.group(0), name)
                else:
                    kind = EMPTY if m.group("empty") else START
                    attrs = parse_attributes(m.group("attrs"))
                    yield Token(kind, lt, end, m.group(0), name, attrs)
        pos = end


# ─────────────────────────────────────────────────────────
# Element extents
# ─────────────────────────────────────────────────────────


def find_elements(text: str, predicate: Callable[[Token], bool]) -> List[Tuple[int, int]]:
    """Find the full extent of every element whose start tag satisfies *predicate*.

    Nesting is tracked with a stack of open tag names, so an element ends at
    the end tag that closes it, not at the first end tag with its name.  An
    end tag for a name further down the stack implicitly closes the
    elements opened after it; an end tag matching nothing open is ignored.

    A matching element nested inside another match is part of the outer
    span and is not reported separately.  A match that is never closed, or
    whose ancestor closes first, is not reported.

    Returns:
        ``(start, end)`` offsets in document order, non-overlapping.
    """
    spans: List[Tuple[int, int]] = []
    stack: List[str] = []
    capture_start: Optional[int] = None
    capture_depth = 0

    for tok in scan(text):
        if tok.kind == START:
            if capture_start is None and predicate(tok):
                capture_start = tok.start
                capture_depth = len(stack)
            stack.append(tok.name)
        elif tok.kind == EMPTY:
            if capture_start is None and predicate(tok):
                spans.append((tok.start, tok.end))
        elif tok.kind == END:
            idx = _last_index(stack, tok.name)
            if idx is None:
                continue
            del stack[idx:]
            if capture_start is None:
                continue
            if idx == capture_depth:
                spans.append((capture_start, tok.end))
                capture_start = None
            elif idx < capture_depth:
                # an ancestor closed while the match was still open
                capture_start = None

    return spans


def _last_index(stack: List[str], name: str) -> Optional[int]:
    for i in range(len(stack) - 1, -1, -1):
        if stack[i] == name:
            return i
    return None


def remove_spans(text: str, spans: List[Tuple[int, int]]) -> str:
    """Return *text* with the given sorted, non-overlapping spans cut out."""
    parts: List[str] = []
    pos = 0
    for start, end in spans:
        parts.append(text[pos:start])
        pos = end
    parts.append(text[pos:])
    return "".join(parts)

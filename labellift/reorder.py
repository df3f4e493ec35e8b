"""
labellift/reorder.py

Move cluster labels to the top layer of a Mermaid SVG.

Mermaid draws subgraph (cluster) titles before the edges, so an edge that
crosses a subgraph title is painted over it.  SVG has no z-index: paint
order is document order.  This module cuts every cluster label out of the
document and re-inserts the labels, in a single block, right before the
closing ``</svg>`` so they are painted last.

Two label shapes are extracted, in two passes:

1. ``<foreignObject class="... cluster-label ...">`` (``htmlLabels`` on)
2. ``<g class="... cluster-label ...">`` (``htmlLabels`` off)

The block collection holds every pass-1 label in document order followed by
every pass-2 label; it is never re-sorted.  Element extents are found with
the nesting-aware scanner, so a label containing nested ``<g>`` groups moves
as a whole.

The inserted block is introduced by a marker comment.  On later runs the
marker identifies the top layer: labels already there are left alone, and
labels found elsewhere are appended to it.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Tuple

from debug_trace import trace, trace_call
from labellift.backdrop import backdrop_class, backdrop_style
from labellift.errors import MalformedDocumentError
from labellift.scanner import COMMENT, Token, find_elements, has_class, remove_spans, scan
from models import (
    CLUSTER_LABEL_CLASS,
    EXTRACTION_ORDER,
    TOP_LAYER_MARKER,
    LabelBlock,
    LabelShape,
    ReorderResult,
)
from settings import AppSettings, get_settings

# Closing root tag, only whitespace may follow it
_ROOT_CLOSE_RE = re.compile(r"</svg>\s*\Z", re.IGNORECASE)

_ROOT_CLOSE = "</svg>"


# ─────────────────────────────────────────────────────────
# Extraction
# ─────────────────────────────────────────────────────────


def label_predicate(shape: LabelShape, class_token: str = CLUSTER_LABEL_CLASS) -> Callable[[Token], bool]:
    """Return a start-tag test for labels of *shape*."""

    def _is_label(tok: Token) -> bool:
        return tok.name == shape.tag and has_class(tok.attrs, class_token)

    return _is_label


def extract_labels(
    text: str, shape: LabelShape, class_token: str = CLUSTER_LABEL_CLASS
) -> Tuple[str, List[LabelBlock]]:
    """Cut every label of *shape* out of *text*.

    Returns:
        ``(remaining_text, blocks)`` with blocks in document order.
    """
    spans = find_elements(text, label_predicate(shape, class_token))
    blocks = [LabelBlock(text[start:end], shape, start, end) for start, end in spans]
    return remove_spans(text, spans), blocks


# ─────────────────────────────────────────────────────────
# Insertion
# ─────────────────────────────────────────────────────────


def compose_insertion(
    blocks: List[LabelBlock],
    marker: str = TOP_LAYER_MARKER,
    style: Optional[str] = None,
) -> str:
    """Build the text inserted before ``</svg>`` for a new top layer."""
    parts = [f"\n<!-- {marker} -->\n"]
    if style:
        parts.append(style + "\n")
    parts.append("\n".join(b.text for b in blocks))
    parts.append("\n")
    return "".join(parts)


def insert_before_root_close(text: str, insertion: str) -> str:
    """Insert *insertion* before the final ``</svg>``.

    Whitespace after the closing tag is dropped and the tag is written in
    lower case.

    Raises:
        MalformedDocumentError: If the document does not end with
            ``</svg>`` (ignoring trailing whitespace).
    """
    m = _ROOT_CLOSE_RE.search(text)
    if m is None:
        raise MalformedDocumentError(
            "no closing </svg> tag at the end of the document; "
            "cannot place the moved labels"
        )
    return text[:m.start()] + insertion + _ROOT_CLOSE


def find_top_layer(
    text: str,
    class_token: str = CLUSTER_LABEL_CLASS,
    marker: str = TOP_LAYER_MARKER,
) -> Optional[int]:
    """Locate a top layer written by an earlier run.

    The top layer starts at the last marker comment and is only recognised
    when everything between that comment and the final ``</svg>`` is
    whitespace, cluster labels, or the backdrop stylesheet.

    Returns:
        Offset of the marker comment, or None.
    """
    closer = _ROOT_CLOSE_RE.search(text)
    if closer is None:
        return None
    body = text[:closer.start()]

    marker_tok: Optional[Token] = None
    for tok in scan(body):
        if tok.kind == COMMENT and tok.comment_body.strip() == marker:
            marker_tok = tok
    if marker_tok is None:
        return None

    style_class = backdrop_class(class_token)
    label_tests = [label_predicate(shape, class_token) for shape in EXTRACTION_ORDER]

    def _belongs(tok: Token) -> bool:
        if tok.name == "style":
            return has_class(tok.attrs, style_class)
        return any(test(tok) for test in label_tests)

    layer = body[marker_tok.end:]
    leftover = remove_spans(layer, find_elements(layer, _belongs))
    if leftover.strip():
        return None
    return marker_tok.start


# ─────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────


def reorder_labels(
    text: str,
    class_token: str = CLUSTER_LABEL_CLASS,
    marker: str = TOP_LAYER_MARKER,
    style: Optional[str] = None,
) -> ReorderResult:
    """Move cluster labels in *text* to the top layer.

    Args:
        text: Full SVG document.
        class_token: Class token identifying cluster labels.
        marker: Comment text introducing the top layer.
        style: Optional ``<style>`` element placed after the marker when a
            new top layer is created.

    Returns:
        ReorderResult.  With no labels to move, ``result.text`` is *text*
        unchanged.

    Raises:
        MalformedDocumentError: If labels were found but the document has no
            closing ``</svg>`` to insert them before.
    """
    layer_start = find_top_layer(text, class_token, marker)
    if layer_start is None:
        head, layer = text, ""
    else:
        head, layer = text[:layer_start], text[layer_start:]

    blocks: List[LabelBlock] = []
    for shape in EXTRACTION_ORDER:
        head, found = extract_labels(head, shape, class_token)
        blocks.extend(found)

    if not blocks:
        return ReorderResult(text)

    if layer_start is None:
        new_text = insert_before_root_close(head, compose_insertion(blocks, marker, style))
        return ReorderResult(new_text, blocks)

    appended = "\n".join(b.text for b in blocks) + "\n"
    return ReorderResult(head + insert_before_root_close(layer, appended), blocks, extended_layer=True)


@trace_call("FILE")
def process_file(
    path: str, settings: Optional[AppSettings] = None, dry_run: bool = False
) -> ReorderResult:
    """Run the filter over the SVG file at *path*, rewriting it in place.

    The file is only written when at least one label was moved and
    *dry_run* is False.  Newlines are read and written untranslated.

    Args:
        path: Path to the SVG file.
        settings: Settings to use; defaults to the global settings.
        dry_run: Compute the result without writing it.

    Returns:
        The ReorderResult for the file's content.

    Raises:
        OSError: If the file cannot be read or written.
        MalformedDocumentError: See :func:`reorder_labels`.
    """
    if settings is None:
        settings = get_settings().settings

    with open(path, "r", encoding="utf-8", newline="") as f:
        text = f.read()
    trace(f"Read {len(text)} characters from {path}", "FILE")

    labels = settings.labels
    style = backdrop_style(labels.class_token, settings.backdrop)
    result = reorder_labels(text, labels.class_token, labels.marker, style)

    for block in result.blocks:
        trace(f"<{block.shape.tag}> label at {block.start}..{block.end}", "LABEL")
    if result.extended_layer:
        trace("Appended to existing top layer", "LABEL")

    if result.changed and not dry_run:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(result.text)
        trace(f"Wrote {len(result.text)} characters to {path}", "FILE")

    return result

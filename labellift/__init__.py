"""
labellift package

Lift Mermaid cluster labels above edges by moving them to the end of the SVG.
"""

from labellift.errors import MalformedDocumentError, UsageError
from labellift.reorder import (
    compose_insertion,
    extract_labels,
    find_top_layer,
    insert_before_root_close,
    process_file,
    reorder_labels,
)

__all__ = [
    "MalformedDocumentError",
    "UsageError",
    "compose_insertion",
    "extract_labels",
    "find_top_layer",
    "insert_before_root_close",
    "process_file",
    "reorder_labels",
]

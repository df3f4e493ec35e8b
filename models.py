"""
models.py

Data models and constants for the cluster label filter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


# Class token Mermaid puts on subgraph titles
CLUSTER_LABEL_CLASS = "cluster-label"

# Comment written in front of the moved labels
TOP_LAYER_MARKER = "moved cluster labels to top layer"


# ----------------------------
# Label shapes
# ----------------------------

class LabelShape(Enum):
    """The two element shapes a cluster label can take.

    Mermaid emits ``<foreignObject>`` labels when ``htmlLabels`` is on and
    plain ``<g>`` groups of SVG text when it is off.
    """
    FOREIGN_OBJECT = "foreignObject"
    GROUP = "g"

    @property
    def tag(self) -> str:
        return self.value


# Extraction order: every foreignObject label first, then every group label
EXTRACTION_ORDER = (LabelShape.FOREIGN_OBJECT, LabelShape.GROUP)


# ----------------------------
# Extraction results
# ----------------------------

@dataclass
class LabelBlock:
    """One extracted label element.

    ``start``/``end`` are offsets into the text the extraction pass scanned,
    which for the group pass is the document with foreignObject labels
    already removed.  They only record where the block came from.
    """
    text: str
    shape: LabelShape
    start: int = 0
    end: int = 0


@dataclass
class ReorderResult:
    """Outcome of running the filter over one document."""
    text: str
    blocks: List[LabelBlock] = field(default_factory=list)
    # True when the blocks were appended to a top layer from an earlier run
    extended_layer: bool = False

    @property
    def moved(self) -> int:
        return len(self.blocks)

    @property
    def changed(self) -> bool:
        return bool(self.blocks)

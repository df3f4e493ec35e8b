"""
labellift/errors.py

Error types raised by the label filter.

File access failures are not wrapped: ``OSError`` from the read or write
propagates unchanged to the caller.
"""

from __future__ import annotations


class UsageError(ValueError):
    """The command line is missing the SVG path."""


class MalformedDocumentError(ValueError):
    """The document has no closing ``</svg>`` to insert the labels before."""

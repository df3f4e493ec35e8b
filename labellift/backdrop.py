"""
labellift/backdrop.py

White backdrop styling for moved cluster labels.

Mermaid draws edge labels on an opaque background so edges passing
underneath do not run through the text.  Cluster labels get no such
treatment.  Once they are lifted above the edges, this stylesheet gives
them the same look:

* HTML content of ``<foreignObject>`` labels gets a ``background-color``
  (the same property Mermaid's ``.edgeLabel`` rule uses).
* SVG ``<text>`` inside group labels cannot carry a background, so it gets a
  halo instead: a stroke in the backdrop colour painted under the fill via
  ``paint-order: stroke``.
"""

from __future__ import annotations

from typing import Optional

from settings import BackdropSettings


def backdrop_css(class_token: str, backdrop: BackdropSettings) -> str:
    """Return the CSS rules for labels carrying *class_token*."""
    sel = f".{class_token}"
    html_rule = (
        f"{sel} div, {sel} span, {sel} p "
        f"{{ background-color: {backdrop.color}; padding: {backdrop.padding}; }}"
    )
    text_rule = (
        f"{sel} text "
        f"{{ paint-order: stroke; stroke: {backdrop.color}; "
        f"stroke-width: {backdrop.halo_width:g}px; stroke-linejoin: round; }}"
    )
    return f"{html_rule} {text_rule}"


def backdrop_style(class_token: str, backdrop: BackdropSettings) -> Optional[str]:
    """Build the ``<style>`` element for the top layer.

    Args:
        class_token: Class token identifying cluster labels.
        backdrop: Backdrop settings section.

    Returns:
        A single-line ``<style>`` element, or None when the backdrop is
        disabled.
    """
    if not backdrop.enabled:
        return None
    return (
        f'<style class="{backdrop_class(class_token)}">'
        f"{backdrop_css(class_token, backdrop)}"
        "</style>"
    )


def backdrop_class(class_token: str) -> str:
    """Class put on the generated ``<style>`` so later runs can recognise it."""
    return f"{class_token}-backdrop"

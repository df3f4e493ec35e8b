"""Tests for labellift/reorder.py: moving cluster labels to the top layer.

Expected outputs are written out in full so that the exact bytes of the
rewritten document are pinned, not just the presence of the labels.
"""
from __future__ import annotations

import os

import pytest

from labellift.backdrop import backdrop_style
from labellift.errors import MalformedDocumentError
from labellift.reorder import (
    compose_insertion,
    extract_labels,
    find_top_layer,
    insert_before_root_close,
    process_file,
    reorder_labels,
)
from models import LabelBlock, LabelShape
from settings import AppSettings, BackdropSettings

MARKER_LINE = "\n<!-- moved cluster labels to top layer -->\n"

# Trimmed-down flowchart output of mermaid-cli with htmlLabels on: the
# subgraph title sits inside the cluster group, before the edges.
MERMAID_SVG = (
    '<svg id="my-svg" xmlns="http://www.w3.org/2000/svg" aria-roledescription="flowchart-v2">'
    "<style>#my-svg .edgeLabel{background-color:#e8e8e8;}</style>"
    '<g class="root"><g class="clusters"><g class="cluster default" id="one">'
    '<rect x="8" y="8" width="200" height="120"/>'
    '<g class="cluster-label" transform="translate(90, 8)">'
    '<foreignObject width="36" height="24">'
    '<div xmlns="http://www.w3.org/1999/xhtml"><span class="nodeLabel">one<br>two</span></div>'
    "</foreignObject></g></g></g>"
    '<g class="edgePaths"><path d="M10,10L100,100" class="flowchart-link"/></g>'
    "</g></svg>\n"
)


# ─────────────────────────────────────────────────────────
# Reference scenarios
# ─────────────────────────────────────────────────────────


class TestReferenceScenarios:
    def test_single_group_label(self):
        text = '<svg><g class="x cluster-label y">A</g><rect/></svg>'
        result = reorder_labels(text)
        assert result.text == (
            "<svg><rect/>\n"
            "<!-- moved cluster labels to top layer -->\n"
            '<g class="x cluster-label y">A</g>\n'
            "</svg>"
        )
        assert result.moved == 1
        assert result.blocks[0].shape is LabelShape.GROUP

    def test_no_labels_is_identity(self):
        text = "<svg><rect/></svg>"
        result = reorder_labels(text)
        assert result.text is text
        assert result.moved == 0
        assert not result.changed

    def test_order_foreign_objects_first(self):
        text = (
            '<svg><g class="cluster-label">G1</g>'
            '<foreignObject class="cluster-label">L1</foreignObject>'
            "<path/>"
            '<g class="cluster-label">G2</g>'
            '<foreignObject class="cluster-label">L2</foreignObject></svg>'
        )
        result = reorder_labels(text)
        assert result.text == (
            "<svg><path/>"
            + MARKER_LINE
            + '<foreignObject class="cluster-label">L1</foreignObject>\n'
            '<foreignObject class="cluster-label">L2</foreignObject>\n'
            '<g class="cluster-label">G1</g>\n'
            '<g class="cluster-label">G2</g>\n'
            "</svg>"
        )
        assert [b.shape for b in result.blocks] == [
            LabelShape.FOREIGN_OBJECT,
            LabelShape.FOREIGN_OBJECT,
            LabelShape.GROUP,
            LabelShape.GROUP,
        ]

    def test_trailing_whitespace_and_case_of_root_closer(self):
        text = '<svg><g class="cluster-label">A</g></SVG>\n\n'
        result = reorder_labels(text)
        assert result.text == '<svg>' + MARKER_LINE + '<g class="cluster-label">A</g>\n</svg>'

    def test_mermaid_flowchart(self):
        result = reorder_labels(MERMAID_SVG)
        assert result.moved == 1
        label = result.blocks[0].text
        assert label.startswith('<g class="cluster-label" transform="translate(90, 8)">')
        assert label.endswith("</foreignObject></g>")
        assert result.text.endswith(MARKER_LINE + label + "\n</svg>")
        # the label is now painted after the edges
        assert result.text.index('class="edgePaths"') < result.text.index(label)
        assert '<g class="cluster default" id="one"><rect x="8" y="8" width="200" height="120"/></g>' in result.text


# ─────────────────────────────────────────────────────────
# Extraction details
# ─────────────────────────────────────────────────────────


class TestExtraction:
    def test_nested_groups_move_whole(self):
        label = '<g class="cluster-label"><g><text>T</text></g><rect/></g>'
        result = reorder_labels(f"<svg>{label}<path/></svg>")
        assert result.text == "<svg><path/>" + MARKER_LINE + label + "\n</svg>"

    def test_foreign_object_inside_group_label(self):
        text = '<svg><g class="cluster-label"><foreignObject class="cluster-label">F</foreignObject></g></svg>'
        result = reorder_labels(text)
        assert result.text == (
            "<svg>"
            + MARKER_LINE
            + '<foreignObject class="cluster-label">F</foreignObject>\n'
            '<g class="cluster-label"></g>\n'
            "</svg>"
        )

    def test_similar_class_names_ignored(self):
        text = '<svg><g class="cluster-labels">A</g><g class="my-cluster-label">B</g></svg>'
        assert reorder_labels(text).moved == 0

    def test_other_elements_with_class_ignored(self):
        text = '<svg><text class="cluster-label">A</text><rect class="cluster-label"/></svg>'
        assert reorder_labels(text).moved == 0

    def test_single_quoted_class(self):
        text = "<svg><g class='cluster-label'>A</g></svg>"
        assert reorder_labels(text).moved == 1

    def test_attributes_without_separating_whitespace(self):
        label = '<g class="cluster-label"transform="translate(1, 2)">A</g>'
        result = reorder_labels(f"<svg>{label}<path/></svg>")
        assert result.text == "<svg><path/>" + MARKER_LINE + label + "\n</svg>"

    def test_commented_out_label_left_alone(self):
        text = '<svg><!-- <g class="cluster-label">A</g> --><rect/></svg>'
        assert reorder_labels(text).text == text

    def test_custom_class_token(self):
        text = '<svg><g class="title">A</g><g class="cluster-label">B</g></svg>'
        result = reorder_labels(text, class_token="title")
        assert [b.text for b in result.blocks] == ['<g class="title">A</g>']

    def test_extract_labels_offsets(self):
        text = '<svg><rect/><g class="cluster-label">A</g></svg>'
        remaining, blocks = extract_labels(text, LabelShape.GROUP)
        assert remaining == "<svg><rect/></svg>"
        assert len(blocks) == 1
        assert text[blocks[0].start:blocks[0].end] == blocks[0].text


# ─────────────────────────────────────────────────────────
# Insertion and malformed documents
# ─────────────────────────────────────────────────────────


class TestInsertion:
    def test_compose_insertion(self):
        blocks = [LabelBlock("<a/>", LabelShape.GROUP), LabelBlock("<b/>", LabelShape.GROUP)]
        assert compose_insertion(blocks) == MARKER_LINE + "<a/>\n<b/>\n"

    def test_compose_insertion_with_style(self):
        blocks = [LabelBlock("<a/>", LabelShape.GROUP)]
        assert compose_insertion(blocks, "m", "<style/>") == "\n<!-- m -->\n<style/>\n<a/>\n"

    def test_insert_uses_last_closer(self):
        text = "<svg><svg></svg></svg>"
        assert insert_before_root_close(text, "X") == "<svg><svg></svg>X</svg>"

    def test_insert_without_closer_raises(self):
        with pytest.raises(MalformedDocumentError):
            insert_before_root_close("<svg><rect/>", "X")

    def test_labels_without_root_closer_raise(self):
        with pytest.raises(MalformedDocumentError):
            reorder_labels('<svg><g class="cluster-label">A</g>')

    def test_content_after_root_closer_raises(self):
        with pytest.raises(MalformedDocumentError):
            reorder_labels('<svg><g class="cluster-label">A</g></svg><!-- end -->')

    def test_no_labels_without_closer_is_fine(self):
        text = "<svg><rect/>"
        assert reorder_labels(text).text == text


# ─────────────────────────────────────────────────────────
# Top layer from earlier runs
# ─────────────────────────────────────────────────────────


class TestTopLayer:
    def test_second_run_finds_nothing(self):
        first = reorder_labels('<svg><g class="x cluster-label y">A</g><rect/></svg>').text
        second = reorder_labels(first)
        assert second.moved == 0
        assert second.text == first

    def test_second_run_on_mermaid_output(self):
        first = reorder_labels(MERMAID_SVG).text
        assert reorder_labels(first).text == first

    def test_find_top_layer(self):
        text = "<svg><rect/>" + MARKER_LINE + '<g class="cluster-label">A</g>\n</svg>'
        assert find_top_layer(text) == text.index("<!--")

    def test_marker_followed_by_other_content_is_not_a_layer(self):
        text = '<svg><!-- moved cluster labels to top layer --><rect/><g class="cluster-label">A</g></svg>'
        assert find_top_layer(text) is None
        result = reorder_labels(text)
        assert result.moved == 1
        assert result.text.count("moved cluster labels to top layer") == 2

    def test_new_labels_join_existing_layer(self):
        text = (
            '<svg><g class="cluster-label">B</g><rect/>'
            + MARKER_LINE
            + '<g class="x cluster-label y">A</g>\n</svg>'
        )
        result = reorder_labels(text)
        assert result.extended_layer
        assert result.text == (
            "<svg><rect/>"
            + MARKER_LINE
            + '<g class="x cluster-label y">A</g>\n'
            '<g class="cluster-label">B</g>\n'
            "</svg>"
        )

    def test_backdrop_style_is_part_of_layer(self):
        style = backdrop_style("cluster-label", BackdropSettings(enabled=True))
        first = reorder_labels('<svg><g class="cluster-label">A</g><rect/></svg>', style=style).text
        assert first == "<svg><rect/>" + MARKER_LINE + style + '\n<g class="cluster-label">A</g>\n</svg>'
        assert reorder_labels(first, style=style).text == first


# ─────────────────────────────────────────────────────────
# process_file
# ─────────────────────────────────────────────────────────


class TestProcessFile:
    def test_rewrites_in_place(self, write_svg):
        path = write_svg('<svg><g class="x cluster-label y">A</g><rect/></svg>')
        result = process_file(str(path), AppSettings())
        assert result.moved == 1
        assert path.read_bytes() == (
            b"<svg><rect/>\n<!-- moved cluster labels to top layer -->\n"
            b'<g class="x cluster-label y">A</g>\n</svg>'
        )

    def test_newlines_not_translated(self, write_svg):
        path = write_svg('<svg>\r\n<g class="cluster-label">A</g>\r\n</svg>\r\n')
        process_file(str(path), AppSettings())
        assert path.read_bytes() == (
            b"<svg>\r\n\r\n\n<!-- moved cluster labels to top layer -->\n"
            b'<g class="cluster-label">A</g>\n</svg>'
        )

    def test_no_labels_does_not_write(self, write_svg):
        path = write_svg("<svg><rect/></svg>")
        os.utime(path, ns=(1_000_000_000, 1_000_000_000))
        result = process_file(str(path), AppSettings())
        assert result.moved == 0
        assert path.stat().st_mtime_ns == 1_000_000_000
        assert path.read_text(encoding="utf-8") == "<svg><rect/></svg>"

    def test_dry_run_does_not_write(self, write_svg):
        original = '<svg><g class="cluster-label">A</g></svg>'
        path = write_svg(original)
        result = process_file(str(path), AppSettings(), dry_run=True)
        assert result.moved == 1
        assert path.read_text(encoding="utf-8") == original

    def test_missing_file_raises(self, tmp_path):
        missing = tmp_path / "missing.svg"
        with pytest.raises(FileNotFoundError):
            process_file(str(missing), AppSettings())
        assert not missing.exists()

    def test_malformed_file_untouched(self, write_svg):
        original = '<svg><g class="cluster-label">A</g>'
        path = write_svg(original)
        with pytest.raises(MalformedDocumentError):
            process_file(str(path), AppSettings())
        assert path.read_text(encoding="utf-8") == original

    def test_backdrop_from_settings(self, write_svg):
        settings = AppSettings()
        settings.backdrop.enabled = True
        path = write_svg('<svg><g class="cluster-label">A</g></svg>')
        process_file(str(path), settings)
        assert '<style class="cluster-label-backdrop">' in path.read_text(encoding="utf-8")

    def test_defaults_to_global_settings(self, write_svg):
        path = write_svg('<svg><g class="cluster-label">A</g></svg>')
        assert process_file(str(path)).moved == 1

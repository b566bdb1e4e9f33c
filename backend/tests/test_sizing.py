"""
Tests for content-driven node sizing.
"""

import pytest

from journey_canvas.canvas import (
    AutoSizer,
    HeuristicMeasurementAdapter,
    Measurement,
    MeasurementAdapter,
    Node,
    NodeKind,
    Size,
    SizeLimits,
)
from journey_canvas.canvas.sizing import estimate_lines
from journey_canvas.exceptions import MeasurementError


class BrokenAdapter(MeasurementAdapter):
    def measure(self, text, width):
        raise MeasurementError("no layout backend")


class FixedAdapter(MeasurementAdapter):
    def __init__(self, height):
        self.height = height

    def measure(self, text, width):
        return Measurement(lines=1, height=self.height)


class TestEstimateLines:
    """Tests for the character-count line estimate."""

    def test_blank_text_has_no_lines(self):
        assert estimate_lines("", 200) == 0
        assert estimate_lines("   \n ", 200) == 0

    def test_wraps_long_paragraph(self):
        # 100px at 8px per char is 12 chars per line
        assert estimate_lines("x" * 25, 100) == 3

    def test_each_paragraph_takes_a_line(self):
        assert estimate_lines("one\n\nthree", 200) == 3


class TestAutoSizer:
    """Tests for AutoSizer.compute_size."""

    def test_idempotent(self):
        """Same inputs always give the same size."""
        sizer = AutoSizer()
        first = sizer.compute_size("Check balance", "Look up the account\nand report it")
        second = sizer.compute_size("Check balance", "Look up the account\nand report it")
        assert first == second

    def test_repeated_sizing_does_not_drift(self):
        sizer = AutoSizer()
        node = Node(kind=NodeKind.AGENT, label="Greet caller", content="Say hello " * 40)
        for _ in range(5):
            node.size = sizer.size_node(node)
        assert node.size == sizer.size_node(node)

    @pytest.mark.parametrize("content", ["", "short", "word " * 2000, "x" * 10001])
    def test_bounds_hold_for_any_content(self, content):
        size = AutoSizer().compute_size("Label", content)
        assert 200 <= size.width <= 800
        assert size.height >= 100

    def test_long_label_clamps_to_max_width(self):
        size = AutoSizer().compute_size("L" * 500, "")
        assert size.width == 800

    def test_more_content_means_taller(self):
        sizer = AutoSizer()
        short = sizer.compute_size("Label", "line " * 10)
        tall = sizer.compute_size("Label", "line " * 200)
        assert tall.height > short.height

    def test_manual_resize_is_sticky(self):
        """A manually resized node keeps its size."""
        prior = Size(width=640, height=480)
        size = AutoSizer().compute_size("Label", "text", prior_size=prior, was_manually_resized=True)
        assert size == prior
        assert size is not prior

    def test_kind_limits_apply(self):
        limits = SizeLimits(min_width=300, max_width=600)
        size = AutoSizer().compute_size("x", "", limits=limits)
        assert size.width == 300

    def test_failing_adapter_falls_back_to_estimate(self):
        fallback = AutoSizer(BrokenAdapter()).compute_size("Label", "text " * 100)
        estimated = AutoSizer().compute_size("Label", "text " * 100)
        assert fallback == estimated

    def test_negative_measurement_is_ignored(self):
        size = AutoSizer(FixedAdapter(-50)).compute_size("Label", "text " * 100)
        assert size == AutoSizer().compute_size("Label", "text " * 100)

    def test_adapter_measurement_is_used(self):
        size = AutoSizer(FixedAdapter(400)).compute_size("Label", "anything")
        # label row + measured body + padding on both sides
        assert size.height == 20 + 400 + 32

    def test_heuristic_adapter_matches_default(self):
        adapter_size = AutoSizer(HeuristicMeasurementAdapter()).compute_size("Label", "text " * 50)
        assert adapter_size == AutoSizer().compute_size("Label", "text " * 50)

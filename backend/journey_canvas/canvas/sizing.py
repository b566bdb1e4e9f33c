"""
Content-driven node sizing.

Width follows the label length; height follows the laid-out content. Real text
layout is delegated to a MeasurementAdapter so the engine can run headless with
the character-count heuristic or against a real typesetting backend.
"""

import math
from abc import ABC, abstractmethod
from typing import NamedTuple, Optional

from loguru import logger

from journey_canvas import constants as const
from journey_canvas.exceptions import MeasurementError

from .node import Node
from .types import Size, SizeLimits


class Measurement(NamedTuple):
    """Result of laying out a block of text at a fixed width."""
    lines: int
    height: float


class MeasurementAdapter(ABC):
    """Lays out text at a given width."""

    @abstractmethod
    def measure(self, text: str, width: float) -> Measurement:
        """
        Measure text wrapped to ``width`` pixels.

        Raises:
            MeasurementError: if the backend can't lay out the text
        """
        ...


def estimate_lines(text: str, width: float, char_width: float = const.CHAR_WIDTH) -> int:
    """Estimate wrapped line count from character counts."""
    if not text or not text.strip():
        return 0
    chars_per_line = max(1, int(width // char_width))
    lines = 0
    for paragraph in text.split("\n"):
        lines += max(1, math.ceil(len(paragraph) / chars_per_line))
    return lines


class HeuristicMeasurementAdapter(MeasurementAdapter):
    """Headless adapter based on a fixed average glyph width."""

    def __init__(self, char_width: float = const.CHAR_WIDTH, line_height: float = const.LINE_HEIGHT):
        self.char_width = char_width
        self.line_height = line_height

    def measure(self, text: str, width: float) -> Measurement:
        lines = estimate_lines(text, width, self.char_width)
        return Measurement(lines=lines, height=lines * self.line_height)


class AutoSizer:
    """
    Computes node box dimensions from label and content.

    The result depends only on the inputs, so repeated calls never drift.
    """

    def __init__(self, adapter: Optional[MeasurementAdapter] = None):
        """
        Args:
            adapter: Text layout backend. Without one, or when it fails,
                the character-count estimate is used.
        """
        self.adapter = adapter

    def compute_width(self, label: str, limits: SizeLimits) -> float:
        natural = len(label) * limits.char_width + 2 * limits.padding + limits.icon_width
        return limits.clamp_width(natural)

    def _content_height(self, content: str, inner_width: float, limits: SizeLimits) -> float:
        if self.adapter is not None:
            try:
                measurement = self.adapter.measure(content, inner_width)
                if measurement.height >= 0:
                    return measurement.height
                logger.warning(f"Measurement adapter returned negative height {measurement.height}")
            except MeasurementError as e:
                logger.warning(f"Text measurement failed, using estimate: {e}")
        return estimate_lines(content, inner_width, limits.char_width) * limits.line_height

    def compute_height(self, content: str, width: float, limits: SizeLimits) -> float:
        inner_width = max(limits.char_width, width - 2 * limits.padding)
        header = limits.line_height  # label row
        body = self._content_height(content, inner_width, limits)
        return limits.clamp_height(header + body + 2 * limits.padding)

    def compute_size(
        self,
        label: str,
        content: str,
        prior_size: Optional[Size] = None,
        was_manually_resized: bool = False,
        limits: Optional[SizeLimits] = None,
    ) -> Size:
        """
        Compute a node's size.

        Args:
            label: Node label (drives width)
            content: Node body text (drives height)
            prior_size: Current size of the node
            was_manually_resized: True while an interactive resize is still in effect
            limits: Clamping rules for the node kind

        Returns:
            ``prior_size`` untouched for a manually resized node, otherwise the
            measured size clamped to ``limits``
        """
        if was_manually_resized and prior_size is not None:
            return prior_size.model_copy()
        limits = limits or SizeLimits()
        width = self.compute_width(label, limits)
        return Size(width=width, height=self.compute_height(content, width, limits))

    def size_node(self, node: Node) -> Size:
        """Compute the size for a node using its kind's limits."""
        return self.compute_size(
            node.label,
            node.content,
            prior_size=node.size,
            was_manually_resized=node.manually_resized,
            limits=node.spec.limits,
        )

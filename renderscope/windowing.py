"""
Windowing Calculator
====================

Computes the minimal index range of a large ordered collection that must be
realized for the current viewport. The host renders only those items and
positions them at render_offset inside a container of total_extent.

Key Features:
- O(1) uniform-extent windowing, no iteration over the collection
- Overscan clamped to the bounds of the collection
- Horizontal variant for row-oriented layouts
- Variable-extent windowing using prefix offsets and binary search

Invalid input policy:
    The calculator never raises. Negative counts, extents, offsets and
    overscan are clamped to zero. An item extent that is not strictly
    positive produces an empty window with a total extent of zero. Every
    clamp is logged at DEBUG level.

Example:
    >>> window = compute_window(1000, 80, 600, 1600, overscan=5)
    >>> window.first_visible, window.last_visible
    (20, 27)
    >>> window.start_index, window.end_index, window.render_offset
    (15, 32, 1200)
"""

import bisect
import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_OVERSCAN = 5


# ============================================================================
# RESULT TYPES
# ============================================================================


@dataclass(frozen=True)
class ViewportState:
    """
    Geometry of the visible window, recomputed on every scroll or resize.

    Attributes:
        scroll_offset: Distance scrolled from the start of the content
        viewport_extent: Visible extent of the container
        item_extent: Uniform extent of one item
        overscan: Items rendered beyond each edge of the viewport
    """

    scroll_offset: float
    viewport_extent: float
    item_extent: float
    overscan: int = DEFAULT_OVERSCAN


@dataclass(frozen=True)
class WindowResult:
    """
    Index range to realize for one viewport state.

    start_index and end_index are the overscanned bounds, so
    visible_indices == range(start_index, end_index + 1). first_visible and
    last_visible are the bounds of the viewport before overscan.
    """

    total_extent: float
    start_index: int
    end_index: int
    visible_indices: Tuple[int, ...]
    render_offset: float
    first_visible: int = 0
    last_visible: int = -1

    @property
    def is_empty(self) -> bool:
        return not self.visible_indices

    def __len__(self) -> int:
        return len(self.visible_indices)


@dataclass(frozen=True)
class DynamicWindowResult:
    """
    Index range to realize for a collection with variable item extents.

    visible_items holds (index, offset, extent) for every realized item.
    """

    total_extent: float
    start_index: int
    end_index: int
    visible_items: Tuple[Tuple[int, float, float], ...]

    @property
    def visible_indices(self) -> Tuple[int, ...]:
        return tuple(index for index, _, _ in self.visible_items)

    @property
    def render_offset(self) -> float:
        return self.visible_items[0][1] if self.visible_items else 0


def _empty(total_extent: float = 0) -> WindowResult:
    return WindowResult(
        total_extent=total_extent,
        start_index=0,
        end_index=-1,
        visible_indices=(),
        render_offset=0,
    )


def _non_negative(name: str, value):
    if value < 0:
        logger.debug(f"Clamping negative {name} {value!r} to 0")
        return 0
    return value


# ============================================================================
# UNIFORM EXTENT
# ============================================================================


def compute_window(
    total_items: int,
    item_extent: float,
    viewport_extent: float,
    scroll_offset: float,
    overscan: int = DEFAULT_OVERSCAN,
) -> WindowResult:
    """
    Compute the index range to render for a uniformly sized collection.

    Args:
        total_items: Number of items in the collection
        item_extent: Extent of one item, must be positive
        viewport_extent: Visible extent of the container
        scroll_offset: Distance scrolled from the start of the content
        overscan: Extra items to render beyond each edge of the viewport

    Returns:
        WindowResult; empty when there are no items or the viewport has
        no extent
    """
    total_items = int(_non_negative("total_items", total_items))
    viewport_extent = _non_negative("viewport_extent", viewport_extent)
    scroll_offset = _non_negative("scroll_offset", scroll_offset)
    overscan = int(_non_negative("overscan", overscan))

    if item_extent <= 0:
        logger.debug(f"Non-positive item_extent {item_extent!r}, returning empty window")
        return _empty()

    total_extent = total_items * item_extent
    if total_items == 0 or viewport_extent == 0:
        return _empty(total_extent)

    last = total_items - 1
    first_visible = min(max(math.floor(scroll_offset / item_extent), 0), last)
    last_visible = min(
        max(math.floor((scroll_offset + viewport_extent) / item_extent), 0), last
    )

    start = max(0, first_visible - overscan)
    end = min(last, last_visible + overscan)

    return WindowResult(
        total_extent=total_extent,
        start_index=start,
        end_index=end,
        visible_indices=tuple(range(start, end + 1)),
        render_offset=start * item_extent,
        first_visible=first_visible,
        last_visible=last_visible,
    )


def compute_window_for(viewport: ViewportState, total_items: int) -> WindowResult:
    """Compute the window for a ViewportState."""
    return compute_window(
        total_items,
        viewport.item_extent,
        viewport.viewport_extent,
        viewport.scroll_offset,
        viewport.overscan,
    )


def compute_horizontal_window(
    total_items: int,
    item_width: float,
    container_width: float,
    scroll_left: float,
    overscan: int = DEFAULT_OVERSCAN,
) -> WindowResult:
    """Horizontal counterpart of compute_window(); extents are widths."""
    return compute_window(total_items, item_width, container_width, scroll_left, overscan)


# ============================================================================
# VARIABLE EXTENT
# ============================================================================


def compute_dynamic_window(
    total_items: int,
    estimated_extent: float,
    viewport_extent: float,
    scroll_offset: float,
    extent_of: Optional[Callable[[int], float]] = None,
    overscan: int = DEFAULT_OVERSCAN,
) -> DynamicWindowResult:
    """
    Compute the index range to render when items have different extents.

    Item offsets are built as prefix sums, the first visible item is found
    with a binary search over the offsets, and the window is extended until
    it covers the bottom of the viewport. Unlike compute_window() this walks
    the whole collection once per call.

    Args:
        total_items: Number of items in the collection
        estimated_extent: Extent used for every item when extent_of is None
        viewport_extent: Visible extent of the container
        scroll_offset: Distance scrolled from the start of the content
        extent_of: Optional callable returning the extent of item i
        overscan: Extra items to render beyond each edge of the viewport

    Returns:
        DynamicWindowResult with per-item offsets and extents
    """
    total_items = int(_non_negative("total_items", total_items))
    viewport_extent = _non_negative("viewport_extent", viewport_extent)
    scroll_offset = _non_negative("scroll_offset", scroll_offset)
    overscan = int(_non_negative("overscan", overscan))

    extents: List[float] = []
    offsets: List[float] = []
    total_extent = 0
    for i in range(total_items):
        extent = extent_of(i) if extent_of is not None else estimated_extent
        extent = _non_negative("item extent", extent)
        extents.append(extent)
        offsets.append(total_extent)
        total_extent += extent

    if total_items == 0 or viewport_extent == 0 or total_extent == 0:
        return DynamicWindowResult(total_extent, 0, -1, ())

    last = total_items - 1
    # Last item starting at or before the scroll offset
    first_visible = min(max(bisect.bisect_right(offsets, scroll_offset) - 1, 0), last)

    viewport_end = scroll_offset + viewport_extent
    last_visible = first_visible
    while last_visible < last and offsets[last_visible + 1] < viewport_end:
        last_visible += 1

    start = max(0, first_visible - overscan)
    end = min(last, last_visible + overscan)

    return DynamicWindowResult(
        total_extent=total_extent,
        start_index=start,
        end_index=end,
        visible_items=tuple((i, offsets[i], extents[i]) for i in range(start, end + 1)),
    )

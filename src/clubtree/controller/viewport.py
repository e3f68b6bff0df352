"""
Viewport / Camera Fit
=====================
Computes the translate + scale transform that shows the visible cards, and
keeps track of the user's own zooming and panning.

The transform maps canvas coordinates to screen pixels:
    screen = canvas * scale + translate
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple, TYPE_CHECKING
import logging

import numpy as np

from clubtree.config import ViewportConfig
from clubtree.controller.layout import LayoutNode
from clubtree.model.geometry import Box, Point

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transform:
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = 1.0

    def apply(self, point: Point) -> Point:
        """Canvas -> screen."""
        return Point(point.x * self.scale + self.translate_x, point.y * self.scale + self.translate_y)

    def invert(self, point: Point) -> Point:
        """Screen -> canvas."""
        return Point((point.x - self.translate_x) / self.scale, (point.y - self.translate_y) / self.scale)


IDENTITY = Transform()


@dataclass(frozen=True)
class ViewportSize:
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.width / 2, self.height / 2)


def bounding_box(nodes: Iterable[LayoutNode], anchors: Iterable[Point] = ()) -> Optional[Box]:
    """
    Union of the card footprints, each with its own size, and of the given
    anchor points (the start of the lord links). None for no cards.
    """
    boxes: npt.NDArray[np.float64] = np.array(
        [(ln.box.left, ln.box.top, ln.box.right, ln.box.bottom) for ln in nodes],
        dtype=np.float64,
    ).reshape(-1, 4)
    if boxes.shape[0] == 0:
        return None
    points = [np.concatenate([p.to_array(), p.to_array()]) for p in anchors]
    edges = np.vstack([boxes, *points]) if points else boxes
    x_min, y_min = edges[:, 0].min(), edges[:, 1].min()
    x_max, y_max = edges[:, 2].max(), edges[:, 3].max()
    return Box(float(x_min), float(y_min), float(x_max), float(y_max))


def clamp_scale(scale: float, config: ViewportConfig) -> float:
    return float(np.clip(scale, config.min_zoom, config.max_zoom))


def fit_to_view(
    nodes: Iterable[LayoutNode],
    viewport: ViewportSize,
    config: Optional[ViewportConfig] = None,
    anchors: Iterable[Point] = (),
) -> Optional[Transform]:
    """
    Transform that centres the bounding box of the cards in the viewport.

    The scale leaves 'padding' pixels free on every side, never exceeds
    'max_fit_scale' and stays inside the zoom extent.

    Returns:
        None when there is nothing to fit.
    """
    config = config or ViewportConfig()
    box = bounding_box(nodes, anchors)
    if box is None:
        return None

    # Cards always have a size, the guard only protects against a zero config
    box_w = max(box.width, 1e-6)
    box_h = max(box.height, 1e-6)
    scale = min(
        (viewport.width - 2 * config.padding) / box_w,
        (viewport.height - 2 * config.padding) / box_h,
    )
    scale = min(scale, config.max_fit_scale)
    scale = clamp_scale(scale, config)

    center = box.center
    return Transform(
        translate_x=viewport.width / 2 - scale * center.x,
        translate_y=viewport.height / 2 - scale * center.y,
        scale=scale,
    )


class ViewportController:
    """
    Holds the current camera transform.

    A fit replaces it and clears the user override; zooming, panning or a
    dragged transform set the override until the next fit.
    """
    def __init__(self, config: Optional[ViewportConfig] = None, size: Tuple[float, float] = (1280, 800)) -> None:
        self.config = config or ViewportConfig()
        self.size = ViewportSize(*size)
        self.transform: Transform = IDENTITY
        self.user_override: bool = False

    def resize(self, width: float, height: float) -> None:
        self.size = ViewportSize(width, height)

    def fit(self, nodes: Iterable[LayoutNode], anchors: Iterable[Point] = ()) -> Transform:
        """Fit the cards; an empty set keeps the current transform."""
        transform = fit_to_view(nodes, self.size, self.config, anchors)
        if transform is None:
            logger.debug("Fit skipped: no visible nodes.")
            return self.transform
        self.transform = transform
        self.user_override = False
        logger.debug(f"Fitted view: {transform}")
        return transform

    def zoom_by(self, factor: float, focus: Optional[Point] = None) -> Transform:
        """Scale by 'factor' around a screen point (the viewport centre by default)."""
        focus = focus or self.size.center
        old = self.transform
        new_scale = clamp_scale(old.scale * factor, self.config)
        k = new_scale / old.scale
        self.transform = Transform(
            translate_x=focus.x - (focus.x - old.translate_x) * k,
            translate_y=focus.y - (focus.y - old.translate_y) * k,
            scale=new_scale,
        )
        self.user_override = True
        return self.transform

    def zoom_in(self) -> Transform:
        return self.zoom_by(self.config.zoom_in_factor)

    def zoom_out(self) -> Transform:
        return self.zoom_by(self.config.zoom_out_factor)

    def pan(self, dx: float, dy: float) -> Transform:
        old = self.transform
        self.transform = replace(old, translate_x=old.translate_x + dx, translate_y=old.translate_y + dy)
        self.user_override = True
        return self.transform

    def set_transform(self, transform: Transform) -> Transform:
        """Adopt a transform produced by a drag/scroll gesture, clamped to the zoom extent."""
        self.transform = replace(transform, scale=clamp_scale(transform.scale, self.config))
        self.user_override = True
        return self.transform

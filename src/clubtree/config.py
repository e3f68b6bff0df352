"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and tunable constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths and magic numbers (node sizes,
   gutters, zoom limits) scattered throughout the layout and viewport code.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (the member JSON) when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEFAULT_MEMBERS_PATH (str): Absolute path to the bundled member list.
    LayoutConfig, ViewportConfig, SessionConfig: Tunable engine parameters.
"""
from __future__ import annotations

import sys
import os
import logging
from dataclasses import dataclass, field
from pathlib import Path

from clubtree.model.geometry import Size

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/clubtree/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_MEMBERS_PATH: str = os.path.join(ASSETS_PATH, "members.json")

if not os.path.exists(ASSETS_PATH):
    logger.warning(f"Assets path not found at {ASSETS_PATH}")


# ------------------------------------------------------------------------------
# Engine parameters
# ------------------------------------------------------------------------------

@dataclass(frozen=True)
class LayoutConfig:
    """
    Sizing and spacing rules of the tree layout.

    Lords get the large card, veterans the standard card and everybody else
    the compact pill. The sibling gutter is the free space kept between two
    neighbouring cards on one level, the vertical gutter the free space
    between the tallest card of a level and the next level.
    """
    lord: Size = field(default_factory=lambda: Size(200.0, 96.0))
    veteran: Size = field(default_factory=lambda: Size(160.0, 72.0))
    regular: Size = field(default_factory=lambda: Size(140.0, 48.0))
    veteran_threshold: int = 5  # attended years
    sibling_gutter: float = 20.0
    vertical_gutter: float = 60.0

    @property
    def level_spacing(self) -> float:
        """Distance between two consecutive depth levels."""
        tallest = max(self.lord.height, self.veteran.height, self.regular.height)
        return tallest + self.vertical_gutter


@dataclass(frozen=True)
class ViewportConfig:
    padding: float = 40.0  # px kept free around the fitted tree
    max_fit_scale: float = 1.0  # never blow up small trees beyond 1:1
    min_zoom: float = 0.2
    max_zoom: float = 3.0
    zoom_in_factor: float = 1.3
    zoom_out_factor: float = 0.7


@dataclass(frozen=True)
class SessionConfig:
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    transition_ms: int = 400
    fit_margin_ms: int = 100
    viewport_width: int = 1280
    viewport_height: int = 800

    @property
    def fit_delay_ms(self) -> int:
        """Delay of the deferred auto-fit after an expand/collapse."""
        return self.transition_ms + self.fit_margin_ms

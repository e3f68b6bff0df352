"""
Session Store
=============
The explicit context object of one tree session.

Why is this file needed?
------------------------
1. Ownership: It holds the record store, the hierarchy (with the expand/
   collapse flags), the previous-position cache and the camera in one place
   instead of module globals.
2. Actions: Every user event (toggle, expand all, search, resize, zoom) is a
   method here that runs one complete pass and commits its result.
3. Signals: The renderer, the camera applier and the detail panel only listen
   to Qt signals; they never reach into the engine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional, Sequence

from PySide6.QtCore import QObject, QTimer, Signal

from clubtree.config import SessionConfig
from clubtree.controller.expansion import toggle, expand_all, collapse_all, visible_nodes
from clubtree.controller.layout import LayoutEngine, LayoutNode
from clubtree.controller.reconciler import Reconciler, PositionCache, ReconciliationResult
from clubtree.controller.search import MatchState, classify, classify_by_year
from clubtree.controller.viewport import ViewportController, Transform
from clubtree.model.hierarchy import Hierarchy, TreeNode, build_hierarchy
from clubtree.model.io import MemberIO
from clubtree.model.members import MemberRecord, MemberDetails, RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Highlight:
    """Search and year classification of the visible cards, kept apart."""
    query: str = ""
    year: Optional[int] = None
    by_query: Dict[str, MatchState] = field(default_factory=dict)
    by_year: Dict[str, MatchState] = field(default_factory=dict)


class Store(QObject):
    """Central session store with signals for renderer/camera/detail sync."""
    frame_changed = Signal(object)
    transform_changed = Signal(object)
    highlight_changed = Signal(object)
    member_selected = Signal(object)

    def __init__(
        self,
        records: RecordStore,
        hierarchy: Hierarchy,
        config: Optional[SessionConfig] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.config = config or SessionConfig()
        self.records = records
        self.hierarchy = hierarchy

        self.layout_engine = LayoutEngine(self.config.layout)
        self.reconciler = Reconciler(
            hierarchy,
            veteran_threshold=self.config.layout.veteran_threshold,
            root_placement=self.layout_engine.root_placement,
        )
        self.positions = PositionCache()
        self.viewport = ViewportController(
            self.config.viewport,
            size=(self.config.viewport_width, self.config.viewport_height),
        )

        self.query: str = ""
        self.year: Optional[int] = None
        self.current: Optional[ReconciliationResult] = None

        # Deferred fit: waits for the expand/collapse animation to settle
        self._fit_timer = QTimer(self)
        self._fit_timer.setSingleShot(True)
        self._fit_timer.setInterval(self.config.fit_delay_ms)
        self._fit_timer.timeout.connect(self.settle)

    @classmethod
    def from_records(
        cls,
        records: Sequence[MemberRecord],
        config: Optional[SessionConfig] = None,
        parent: Optional[QObject] = None,
    ) -> Store:
        """Validate the member list and build a session. Data errors propagate."""
        config = config or SessionConfig()
        record_store = RecordStore(records, veteran_threshold=config.layout.veteran_threshold)
        hierarchy = build_hierarchy(record_store.records)
        return cls(record_store, hierarchy, config=config, parent=parent)

    @classmethod
    def from_file(
        cls,
        filepath: Optional[str] = None,
        config: Optional[SessionConfig] = None,
        parent: Optional[QObject] = None,
    ) -> Store:
        return cls.from_records(MemberIO.load_members(filepath), config=config, parent=parent)

    # ------------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------------

    def visible_nodes(self) -> List[TreeNode]:
        return visible_nodes(self.hierarchy)

    @property
    def layout(self) -> Dict[str, LayoutNode]:
        return dict(self.current.layout) if self.current is not None else {}

    @property
    def transform(self) -> Transform:
        return self.viewport.transform

    @property
    def fit_pending(self) -> bool:
        return self._fit_timer.isActive()

    def highlight(self) -> Highlight:
        nodes = self.visible_nodes()
        return Highlight(
            query=self.query,
            year=self.year,
            by_query=classify(self.query, nodes),
            by_year=classify_by_year(self.year, nodes),
        )

    # ------------------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------------------

    def refresh(self, fit: bool = False) -> ReconciliationResult:
        """
        Run one layout + reconcile pass for the current expansion flags.

        Nothing shared is touched until the pass has been fully computed. The
        first pass of a session always fits the view.
        """
        fit = fit or self.current is None
        layout = self.layout_engine.layout(self.visible_nodes())
        result = self.reconciler.reconcile(self.positions.as_mapping(), layout)

        self.positions.commit(layout)
        self.current = result
        self.frame_changed.emit(result)
        # Entering cards need their search/year class too
        self.highlight_changed.emit(self.highlight())

        if fit:
            self.fit_to_view()
        return result

    def _after_structure_change(self) -> ReconciliationResult:
        result = self.refresh()
        # Restarting drops the fit of a pass that was superseded
        self._fit_timer.start()
        return result

    def toggle(self, member_id: str) -> Optional[ReconciliationResult]:
        """Expand/collapse one member. None if the member has nothing to toggle."""
        if not toggle(self.hierarchy, member_id):
            return None
        return self._after_structure_change()

    def expand_all(self) -> Optional[ReconciliationResult]:
        if not expand_all(self.hierarchy):
            return None
        return self._after_structure_change()

    def collapse_all(self) -> Optional[ReconciliationResult]:
        if not collapse_all(self.hierarchy):
            return None
        return self._after_structure_change()

    # ------------------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------------------

    def fit_to_view(self) -> Transform:
        """Fit the current cards; with nothing on screen the camera stays put."""
        if not self.layout:
            return self.viewport.transform
        # Keep the lord links on screen too
        transform = self.viewport.fit(self.layout.values(), [self.layout_engine.root_placement.position])
        self.transform_changed.emit(transform)
        return transform

    def settle(self) -> Transform:
        """Called when the transition animation is over (or by the fallback timer)."""
        self._fit_timer.stop()
        return self.fit_to_view()

    def resize(self, width: float, height: float) -> Transform:
        self.viewport.resize(width, height)
        return self.fit_to_view()

    def zoom_in(self) -> Transform:
        return self._emit_transform(self.viewport.zoom_in())

    def zoom_out(self) -> Transform:
        return self._emit_transform(self.viewport.zoom_out())

    def pan(self, dx: float, dy: float) -> Transform:
        return self._emit_transform(self.viewport.pan(dx, dy))

    def set_transform(self, transform: Transform) -> Transform:
        return self._emit_transform(self.viewport.set_transform(transform))

    def _emit_transform(self, transform: Transform) -> Transform:
        self.transform_changed.emit(transform)
        return transform

    # ------------------------------------------------------------------------------
    # Overlay & details
    # ------------------------------------------------------------------------------

    def search(self, query: str) -> Highlight:
        self.query = query or ""
        highlight = self.highlight()
        self.highlight_changed.emit(highlight)
        return highlight

    def filter_year(self, year: Optional[int]) -> Highlight:
        self.year = year
        highlight = self.highlight()
        self.highlight_changed.emit(highlight)
        return highlight

    def select(self, member_id: str) -> MemberDetails:
        """Hand the full record of a clicked card to the detail panel."""
        details = self.records.details(member_id)
        logger.debug(f"Selected member '{member_id}'.")
        self.member_selected.emit(details)
        return details

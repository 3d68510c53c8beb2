"""
Skill Tree Session
Central management of one interactive skill graph view.
"""

from typing import Optional, List, Dict, Any, Callable
import logging

from skilltree.config import ROOT_ID, LayoutConfig, RenderStyle
from skilltree.skills.taxonomy import GraphModel, SkillNode, SkillLink, build_skill_graph
from skilltree.skills.progression import (
    AnnotatedNode,
    ProgressRecord,
    UnlockEngine,
)
from skilltree.simulation.layout import LayoutSimulation, SimulationHandle, LayoutFrame
from skilltree.render.renderer import RenderStats, SkillGraphRenderer, describe_node
from skilltree.render.surface import DrawingSurface


logger = logging.getLogger(__name__)


class SkillTreeSession:
    """
    One view session over a skill graph.

    Handles:
    - Current progress record and unlock requests
    - Visible subgraph and its annotation
    - Ownership of the running layout simulation (restarted on
      visible-set or canvas changes)
    - Hover state and per-frame rendering
    """

    def __init__(
        self,
        graph: Optional[GraphModel] = None,
        progress: Optional[ProgressRecord] = None,
        width: float = 800,
        height: float = 600,
        layout_config: Optional[LayoutConfig] = None,
        style: Optional[RenderStyle] = None,
        entry_id: str = ROOT_ID,
        show_frontier: bool = False,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize session.

        Args:
            graph: Skill graph (builds the default taxonomy if None)
            progress: Starting record (engine's initial record if None)
            width: Canvas width
            height: Canvas height
            layout_config: Layout parameters
            style: Render style
            entry_id: Node whose unlock cascades to the whole graph
            show_frontier: Also show unlockable nodes
            clock: Monotonic clock for the layout cooldown
        """
        self.graph = graph or build_skill_graph()
        self.engine = UnlockEngine(self.graph, entry_id=entry_id)
        self._progress = progress if progress is not None else self.engine.initial_progress()
        self.width = width
        self.height = height
        self.layout_config = layout_config or LayoutConfig()
        self.renderer = SkillGraphRenderer(style)
        self.show_frontier = show_frontier
        self._clock = clock

        self.hovered_id: Optional[str] = None
        self.handle: Optional[SimulationHandle] = None
        self.restarts = 0

        # Callbacks
        self._progress_callbacks: List[Callable[[ProgressRecord], None]] = []

        self.restart_layout()

    # ==================== Progress ====================

    @property
    def progress(self) -> ProgressRecord:
        return self._progress

    def on_progress_change(self, callback: Callable[[ProgressRecord], None]) -> None:
        """Register callback for each new progress record (e.g. to persist it)"""
        self._progress_callbacks.append(callback)

    def set_progress(self, progress: ProgressRecord) -> None:
        """Replace the progress record (restarts the layout if the view changes)"""
        if progress == self._progress:
            return
        before = self._visible_ids()
        self._progress = progress

        for callback in self._progress_callbacks:
            callback(progress)

        if self._visible_ids() != before:
            self.restart_layout()

    def activate(self, node_id: str) -> bool:
        """
        Double-activation on a node: unlock it if possible.

        Returns:
            Whether progress changed
        """
        updated = self.engine.unlock(node_id, self._progress)
        if updated == self._progress:
            return False
        self.set_progress(updated)
        return True

    # ==================== Visibility ====================

    def visible_nodes(self) -> List[SkillNode]:
        """Unlocked nodes and the root (plus the unlockable frontier if enabled)"""
        visible = self.graph.visible_nodes(self._progress)
        if not self.show_frontier:
            return visible

        shown = {node.id for node in visible}
        frontier = set(self.engine.unlockable_ids(self._progress))
        return [
            node for node in self.graph.nodes
            if node.id in shown or node.id in frontier
        ]

    def _visible_ids(self) -> tuple[str, ...]:
        return tuple(node.id for node in self.visible_nodes())

    def annotated_nodes(self) -> List[AnnotatedNode]:
        return self.engine.annotate(self._progress, self.visible_nodes())

    def visible_links(self) -> List[SkillLink]:
        return self.graph.visible_links(self.visible_nodes())

    # ==================== Layout ====================

    def restart_layout(self) -> SimulationHandle:
        """Stop the running simulation and start a fresh one"""
        if self.handle is not None:
            self.handle.stop()

        nodes = self.visible_nodes()
        self.handle = LayoutSimulation.start(
            nodes,
            self.graph.visible_links(nodes),
            self.width,
            self.height,
            self.layout_config,
            clock=self._clock,
        )
        self.restarts += 1
        logger.debug(f"Layout restarted ({self.restarts}) with {len(nodes)} visible nodes")
        return self.handle

    def resize(self, width: float, height: float) -> SimulationHandle:
        """
        New canvas dimensions.

        Raises:
            ValueError: If a dimension is not positive
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas dimensions must be positive, got {width}x{height}")
        if (width, height) == (self.width, self.height) and self.handle is not None:
            return self.handle

        self.width = width
        self.height = height
        return self.restart_layout()

    def tick(self) -> LayoutFrame:
        """Advance the layout by one frame"""
        return self.handle.tick()

    # ==================== Pointer & rendering ====================

    def hover(self, node_id: Optional[str]) -> Optional[AnnotatedNode]:
        """
        Set the highlighted node; None, unknown or hidden ids clear it.
        """
        if node_id is None or node_id not in self._visible_ids():
            self.hovered_id = None
            return None

        self.hovered_id = node_id
        node = self.graph.get_node(node_id)
        return AnnotatedNode(node, self.engine.state_of(node_id, self._progress))

    def tooltip(self) -> Optional[Dict[str, Any]]:
        """Tooltip content for the hovered node"""
        if self.hovered_id is None:
            return None
        node = self.graph.get_node(self.hovered_id)
        return describe_node(AnnotatedNode(node, self.engine.state_of(node.id, self._progress)))

    def render(self, surface: DrawingSurface) -> RenderStats:
        """Paint the current frame"""
        return self.renderer.render(
            surface,
            self.annotated_nodes(),
            self.visible_links(),
            self.handle.positions,
            self.hovered_id,
        )

    def summary(self) -> Dict[str, Any]:
        """Progress summary"""
        return {
            "unlocked": len(self._progress.unlocked_ids),
            "total": len(self.graph) - 1,
            "completion": self.engine.completion(self._progress),
            "skill_profile": self.engine.skill_profile(self._progress).to_dict(),
            "unlockable": self.engine.unlockable_ids(self._progress),
        }

    def close(self) -> None:
        """Release the running simulation"""
        if self.handle is not None:
            self.handle.stop()

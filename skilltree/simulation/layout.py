"""
Layout Simulation
Force-directed placement of the visible skill graph.
"""

from typing import Optional, List, Dict, Any, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
import asyncio
import logging
import math
import time

import numpy as np

from skilltree.config import LayoutConfig, NodeLevel
from skilltree.simulation.forces import (
    ForceState,
    Force,
    CenterForce,
    LinkForce,
    ManyBodyForce,
    CollideForce,
    RadialForce,
)
from skilltree.simulation.diagnostics import Overlap, find_overlaps, summarize_overlaps


logger = logging.getLogger(__name__)


class SimulationState(str, Enum):
    """State of a layout simulation"""
    RUNNING = "running"
    SETTLED = "settled"
    STOPPED = "stopped"


@dataclass(frozen=True)
class NodePosition:
    """Position of one node in one frame"""
    x: float
    y: float
    pinned: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "pinned": self.pinned}


@dataclass(frozen=True)
class LayoutFrame:
    """Snapshot returned by every tick"""
    tick: int
    alpha: float
    positions: Dict[str, NodePosition]
    settled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "alpha": self.alpha,
            "settled": self.settled,
            "positions": {nid: pos.to_dict() for nid, pos in self.positions.items()},
        }


def level_radii(width: float, height: float, config: LayoutConfig) -> Dict[int, float]:
    """Ring radius per level for a canvas"""
    smallest = min(width, height)
    return {
        level: smallest * config.ring_fraction(level)
        for level in (NodeLevel.ROOT, NodeLevel.DOMAIN, NodeLevel.MODULE)
    }


def seed_positions(
    nodes: Sequence[Any],
    width: float,
    height: float,
    config: Optional[LayoutConfig] = None,
) -> Dict[str, NodePosition]:
    """
    Place nodes on concentric rings by level.

    The i-th of N nodes sharing a level sits at angle i/N * 2pi on that
    level's ring. Root and domain nodes are pinned.

    Args:
        nodes: Nodes with id and level, in display order
        width: Canvas width
        height: Canvas height
        config: Layout configuration

    Returns:
        Dict of node_id -> NodePosition
    """
    config = config or LayoutConfig()
    cx, cy = width / 2, height / 2
    smallest = min(width, height)

    by_level: Dict[int, List[str]] = {}
    for node in nodes:
        by_level.setdefault(int(node.level), []).append(node.id)

    positions = {}
    for node in nodes:
        level = int(node.level)
        siblings = by_level[level]
        radius = smallest * config.ring_fraction(level)
        angle = siblings.index(node.id) * 2 * math.pi / len(siblings)
        positions[node.id] = NodePosition(
            x=cx + radius * math.cos(angle),
            y=cy + radius * math.sin(angle),
            pinned=level <= NodeLevel.DOMAIN,
        )
    return positions


class LayoutSimulation:
    """
    Multi-force relaxation of the visible subgraph.

    Forces per tick:
    - Centering toward the canvas center
    - Link springs at the minimum spacing
    - Many-body repulsion, stronger for the root, cut off at a max distance
    - Collision by level (domains largest)
    - Radial pull toward each level's ring

    Owns its positions: nodes are never written to. Each tick produces an
    immutable LayoutFrame.
    """

    def __init__(
        self,
        nodes: Sequence[Any],
        links: Sequence[Any],
        width: float,
        height: float,
        config: Optional[LayoutConfig] = None,
    ):
        """
        Initialize simulation from a fresh seed.

        Args:
            nodes: Visible nodes (anything with id and level)
            links: Visible links (anything with source_id and target_id)
            width: Canvas width
            height: Canvas height
            config: Layout configuration
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas dimensions must be positive, got {width}x{height}")

        self.config = config or LayoutConfig()
        self.width = float(width)
        self.height = float(height)
        self.ids: List[str] = [node.id for node in nodes]
        self.levels: List[int] = [int(node.level) for node in nodes]
        self._index = {nid: i for i, nid in enumerate(self.ids)}

        cfg = self.config
        smallest = min(self.width, self.height)
        self.min_spacing = smallest * cfg.spacing_fraction
        self.center = (self.width / 2, self.height / 2)

        # Initial placement
        seeds = seed_positions(nodes, self.width, self.height, cfg)
        self.pinned = np.array([seeds[nid].pinned for nid in self.ids], dtype=bool)
        points = np.array(
            [[seeds[nid].x, seeds[nid].y] for nid in self.ids], dtype=float
        ).reshape(-1, 2)
        self._fixed = points.copy()
        self._state = ForceState(
            positions=points,
            velocities=np.zeros_like(points),
            rng=np.random.default_rng(cfg.seed),
        )

        self.collide_radii = np.array(
            [self.min_spacing * cfg.collide_fraction(level) for level in self.levels]
        )
        self.forces: Dict[str, Force] = self._build_forces(links)

        self.alpha = cfg.alpha
        self.tick_count = 0

    def _build_forces(self, links: Sequence[Any]) -> Dict[str, Force]:
        """Create the force set for the current canvas"""
        cfg = self.config
        spacing = self.min_spacing
        cx, cy = self.center
        radii = level_radii(self.width, self.height, cfg)

        index_links = [
            (self._index[link.source_id], self._index[link.target_id])
            for link in links
            if link.source_id in self._index and link.target_id in self._index
        ]
        charges = np.array([
            spacing * (cfg.root_charge if level == NodeLevel.ROOT else cfg.node_charge)
            for level in self.levels
        ])
        rings = np.array([radii.get(level, radii[NodeLevel.MODULE]) for level in self.levels])

        return {
            "center": CenterForce(cx, cy, cfg.center_strength),
            "link": LinkForce(index_links, len(self.ids), spacing, cfg.link_strength),
            "charge": ManyBodyForce(charges, distance_max=spacing * cfg.charge_distance_max),
            "collide": CollideForce(
                self.collide_radii, cfg.collide_strength, cfg.collide_iterations
            ),
            "radial": RadialForce(rings, cx, cy, cfg.radial_strength),
        }

    @classmethod
    def start(
        cls,
        nodes: Sequence[Any],
        links: Sequence[Any],
        width: float,
        height: float,
        config: Optional[LayoutConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "SimulationHandle":
        """Build a simulation and hand back its owning handle"""
        simulation = cls(nodes, links, width, height, config)
        logger.debug(
            f"Layout started: {len(simulation.ids)} nodes on {width}x{height}, "
            f"spacing {simulation.min_spacing:.1f}"
        )
        return SimulationHandle(simulation, clock=clock)

    # ==================== Stepping ====================

    def step(self) -> None:
        """Advance the physics by one tick"""
        cfg = self.config
        self.alpha += (cfg.alpha_target - self.alpha) * cfg.alpha_decay

        for force in self.forces.values():
            force.apply(self._state, self.alpha)

        state = self._state
        state.velocities *= 1 - cfg.velocity_decay
        state.velocities[self.pinned] = 0.0
        state.positions += state.velocities
        state.positions[self.pinned] = self._fixed[self.pinned]

        self.tick_count += 1

    def positions(self) -> Dict[str, NodePosition]:
        """Immutable copy of current positions"""
        points = self._state.positions
        return {
            nid: NodePosition(float(points[i, 0]), float(points[i, 1]), bool(self.pinned[i]))
            for i, nid in enumerate(self.ids)
        }

    def frame(self, settled: bool = False) -> LayoutFrame:
        return LayoutFrame(
            tick=self.tick_count,
            alpha=self.alpha,
            positions=self.positions(),
            settled=settled,
        )

    def diagnose(self, min_spacing: Optional[float] = None) -> List[Overlap]:
        """
        Find pairs still overlapping.

        Args:
            min_spacing: Uniform spacing; defaults to per-pair collision radii
        """
        return find_overlaps(
            self.ids,
            self._state.positions,
            radii=self.collide_radii,
            min_spacing=min_spacing,
        )


class SimulationHandle:
    """
    Exclusive owner of a running layout simulation.

    The host advances it one tick per animation frame, either by calling
    tick() or by awaiting run(). stop() ends it for good.
    """

    def __init__(
        self,
        simulation: LayoutSimulation,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize handle.

        Args:
            simulation: Simulation to own
            clock: Monotonic clock in seconds (for the cooldown budget)
        """
        self.simulation = simulation
        self._clock = clock or time.monotonic
        self._started_at: Optional[float] = None
        self.state = SimulationState.RUNNING
        self._frame = simulation.frame()
        self._overlaps: List[Overlap] = []

        # Callbacks
        self._tick_callbacks: List[Callable[[LayoutFrame], None]] = []
        self._settled_callbacks: List[Callable[[LayoutFrame], None]] = []

    @property
    def is_running(self) -> bool:
        return self.state == SimulationState.RUNNING

    @property
    def settled(self) -> bool:
        return self.state == SimulationState.SETTLED

    @property
    def stopped(self) -> bool:
        return self.state == SimulationState.STOPPED

    @property
    def frame(self) -> LayoutFrame:
        """Last produced frame"""
        return self._frame

    @property
    def positions(self) -> Dict[str, NodePosition]:
        return self._frame.positions

    @property
    def overlaps(self) -> List[Overlap]:
        """Overlaps found when the simulation settled"""
        return list(self._overlaps)

    def on_tick(self, callback: Callable[[LayoutFrame], None]) -> None:
        """Register callback for each tick"""
        self._tick_callbacks.append(callback)

    def on_settled(self, callback: Callable[[LayoutFrame], None]) -> None:
        """Register callback for settling"""
        self._settled_callbacks.append(callback)

    def elapsed_ms(self) -> float:
        """Wall time since the first tick"""
        if self._started_at is None:
            return 0.0
        return (self._clock() - self._started_at) * 1000.0

    def _cooled_down(self) -> bool:
        cfg = self.simulation.config
        if self.simulation.alpha < cfg.alpha_min:
            return True
        if cfg.cooldown_ticks is not None and self.simulation.tick_count >= cfg.cooldown_ticks:
            return True
        if cfg.cooldown_time_ms is not None and self.elapsed_ms() >= cfg.cooldown_time_ms:
            return True
        return False

    def tick(self) -> LayoutFrame:
        """
        Advance one tick.

        Settled or stopped simulations do not move; the last frame is
        returned unchanged.
        """
        if not self.is_running:
            return self._frame

        if self._started_at is None:
            self._started_at = self._clock()
        self.simulation.step()
        settled = self._cooled_down()
        self._frame = self.simulation.frame(settled=settled)

        for callback in self._tick_callbacks:
            callback(self._frame)

        if settled:
            self._settle()
        return self._frame

    def _settle(self) -> None:
        self.state = SimulationState.SETTLED
        self._overlaps = self.simulation.diagnose()

        if self._overlaps:
            summary = summarize_overlaps(self._overlaps)
            logger.warning(
                f"Layout settled with {summary['count']} overlapping pairs "
                f"(max depth {summary['max_depth']:.1f}) among {summary['nodes']}"
            )
        logger.info(
            f"Layout settled after {self.simulation.tick_count} ticks "
            f"(alpha {self.simulation.alpha:.4f}, {self.elapsed_ms():.0f} ms)"
        )

        for callback in self._settled_callbacks:
            callback(self._frame)

    def diagnose(self, min_spacing: Optional[float] = None) -> List[Overlap]:
        """Overlap check on the current positions"""
        return self.simulation.diagnose(min_spacing)

    def run_until_settled(self, max_ticks: Optional[int] = None) -> LayoutFrame:
        """
        Tick synchronously until settled, stopped or max_ticks reached.

        Returns:
            Last frame
        """
        ticks = 0
        while self.is_running and (max_ticks is None or ticks < max_ticks):
            self.tick()
            ticks += 1
        return self._frame

    async def run(self, frame_interval: float = 1 / 60) -> LayoutFrame:
        """
        Cooperative loop: one tick per frame until settled or stopped.

        Args:
            frame_interval: Seconds to yield between ticks
        """
        if self.stopped:
            raise RuntimeError("Cannot run a stopped layout simulation")

        while self.is_running:
            self.tick()
            await asyncio.sleep(frame_interval)
        return self._frame

    def stop(self) -> None:
        """Stop ticking; positions stay as they are"""
        if self.stopped:
            return
        self.state = SimulationState.STOPPED
        self._tick_callbacks.clear()
        self._settled_callbacks.clear()
        logger.debug(f"Layout stopped at tick {self.simulation.tick_count}")

"""
Layout Tests
Ring seeding, force relaxation, cooldown and handle lifecycle.

Run with: python -m pytest tests/test_layout.py -v
"""

import pytest
import sys
import os
import asyncio
import math

import numpy as np

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from skilltree.config import ROOT_ID, LayoutConfig, NodeLevel
from skilltree.skills.taxonomy import build_skill_graph
from skilltree.skills.progression import ProgressRecord
from skilltree.simulation.diagnostics import find_overlaps, summarize_overlaps
from skilltree.simulation.forces import ForceState, ManyBodyForce, LinkForce
from skilltree.simulation.layout import (
    LayoutSimulation,
    SimulationHandle,
    SimulationState,
    level_radii,
    seed_positions,
)


class FakeClock:
    """Manually advanced monotonic clock (seconds)"""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def config():
    """Tick-bounded config independent of wall time"""
    return LayoutConfig(cooldown_time_ms=None)


@pytest.fixture
def six_nodes():
    """Root, two domains and the first domain's three modules"""
    graph = build_skill_graph()
    first, second = graph.domains()[:2]
    ids = [first.id, second.id] + [m.id for m in graph.modules_of(first.id)]
    progress = ProgressRecord.of(ids)
    nodes = graph.visible_nodes(progress)
    return nodes, graph.visible_links(nodes)


class TestSeeding:
    """Tests for the initial ring placement"""

    def test_ring_radii(self):
        """Radii scale with the smaller canvas dimension"""
        radii = level_radii(800, 600, LayoutConfig())
        assert radii[NodeLevel.ROOT] == pytest.approx(60)
        assert radii[NodeLevel.DOMAIN] == pytest.approx(210)
        assert radii[NodeLevel.MODULE] == pytest.approx(360)

    def test_nodes_on_rings(self, six_nodes):
        """Every node starts on its level's ring, spread evenly by angle"""
        nodes, _ = six_nodes
        positions = seed_positions(nodes, 800, 600)
        radii = level_radii(800, 600, LayoutConfig())

        for node in nodes:
            pos = positions[node.id]
            dist = math.hypot(pos.x - 400, pos.y - 300)
            assert dist == pytest.approx(radii[node.level])

        modules = [n for n in nodes if n.level == NodeLevel.MODULE]
        angles = [
            math.atan2(positions[m.id].y - 300, positions[m.id].x - 400) % (2 * math.pi)
            for m in modules
        ]
        assert angles == pytest.approx([0, 2 * math.pi / 3, 4 * math.pi / 3])

    def test_pinning(self, six_nodes):
        """Root and domains are pinned, modules free"""
        nodes, _ = six_nodes
        positions = seed_positions(nodes, 800, 600)
        for node in nodes:
            assert positions[node.id].pinned == (node.level <= NodeLevel.DOMAIN)

    def test_invalid_canvas(self, six_nodes):
        """Non-positive dimensions are rejected"""
        nodes, links = six_nodes
        with pytest.raises(ValueError):
            LayoutSimulation(nodes, links, 0, 600)
        with pytest.raises(ValueError):
            LayoutSimulation.start(nodes, links, 800, -1)


class TestForces:
    """Tests for individual forces"""

    def test_coincident_points_separate(self):
        """Many-body repulsion never divides by zero on coincident nodes"""
        state = ForceState(
            positions=np.zeros((2, 2)),
            velocities=np.zeros((2, 2)),
            rng=np.random.default_rng(0),
        )
        ManyBodyForce(np.array([-30.0, -30.0])).apply(state, alpha=1.0)
        assert np.isfinite(state.velocities).all()

    def test_link_pulls_toward_distance(self):
        """A stretched link pulls its ends together"""
        state = ForceState(
            positions=np.array([[0.0, 0.0], [100.0, 0.0]]),
            velocities=np.zeros((2, 2)),
            rng=np.random.default_rng(0),
        )
        LinkForce([(0, 1)], 2, distance=10, strength=0.5).apply(state, alpha=1.0)
        assert state.velocities[0, 0] > 0
        assert state.velocities[1, 0] < 0


class TestSimulation:
    """Tests for the relaxation itself"""

    def test_pinned_nodes_do_not_move(self, six_nodes, config):
        """Pinned nodes keep their seeded coordinates"""
        nodes, links = six_nodes
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        seeds = seed_positions(nodes, 800, 600, config)

        for _ in range(50):
            handle.tick()

        for node_id, pos in handle.positions.items():
            if pos.pinned:
                assert pos.x == pytest.approx(seeds[node_id].x)
                assert pos.y == pytest.approx(seeds[node_id].y)

    def test_positions_finite(self, six_nodes, config):
        """No NaN ever enters the layout"""
        nodes, links = six_nodes
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        frame = handle.run_until_settled()
        for pos in frame.positions.values():
            assert math.isfinite(pos.x) and math.isfinite(pos.y)

    def test_alpha_decays_to_settle(self, six_nodes, config):
        """Without a time budget the layout settles once alpha drops below the minimum"""
        nodes, links = six_nodes
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        frame = handle.run_until_settled()

        assert handle.settled
        assert frame.settled
        assert frame.alpha < config.alpha_min

    def test_overlaps_only_as_reported(self, six_nodes, config):
        """After settling, every pair closer than its collision spacing is in the diagnostic"""
        nodes, links = six_nodes
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        handle.run_until_settled()

        simulation = handle.simulation
        radius = dict(zip(simulation.ids, simulation.collide_radii))
        positions = handle.positions
        reported = {frozenset((o.node_a, o.node_b)) for o in handle.overlaps}

        ids = list(positions)
        for i, a in enumerate(ids):
            for b in ids[i + 1:]:
                dist = math.hypot(positions[a].x - positions[b].x, positions[a].y - positions[b].y)
                if dist < radius[a] + radius[b]:
                    assert frozenset((a, b)) in reported

    def test_free_modules_separated(self, six_nodes, config):
        """Settled modules keep their collision spacing from one another"""
        nodes, links = six_nodes
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        handle.run_until_settled()

        spacing = 600 * config.spacing_fraction
        min_distance = 2 * config.collide_fraction(NodeLevel.MODULE) * spacing
        modules = [node.id for node in nodes if node.level == NodeLevel.MODULE]
        assert len(modules) == 3

        positions = handle.positions
        for i, a in enumerate(modules):
            for b in modules[i + 1:]:
                dist = math.hypot(positions[a].x - positions[b].x, positions[a].y - positions[b].y)
                assert dist >= 0.95 * min_distance

    def test_deterministic(self, six_nodes, config):
        """Same inputs and seed give the same layout"""
        nodes, links = six_nodes
        first = LayoutSimulation.start(nodes, links, 800, 600, config).run_until_settled()
        second = LayoutSimulation.start(nodes, links, 800, 600, config).run_until_settled()
        assert first.positions == second.positions

    def test_single_node(self, config):
        """A lone root settles without forces blowing up"""
        root = build_skill_graph().root
        handle = LayoutSimulation.start([root], [], 800, 600, config)
        frame = handle.run_until_settled()
        assert frame.positions[ROOT_ID].pinned
        assert handle.overlaps == []


class TestCooldown:
    """Tests for the cooldown budget"""

    def test_time_budget(self, six_nodes):
        """Settles once the wall-clock budget is spent, even with energy left"""
        nodes, links = six_nodes
        clock = FakeClock()
        handle = LayoutSimulation.start(
            nodes, links, 800, 600, LayoutConfig(cooldown_time_ms=5000), clock=clock
        )

        handle.tick()
        assert handle.is_running

        clock.advance(5.0)
        frame = handle.tick()
        assert handle.settled
        assert frame.alpha > LayoutConfig().alpha_min

    def test_budget_starts_at_first_tick(self, six_nodes):
        """Time spent before the first tick does not count against the budget"""
        nodes, links = six_nodes
        clock = FakeClock()
        handle = LayoutSimulation.start(nodes, links, 800, 600, LayoutConfig(), clock=clock)

        clock.advance(6.0)
        frame = handle.tick()
        assert handle.is_running
        assert frame.tick == 1
        assert handle.elapsed_ms() == 0.0

        clock.advance(5.0)
        handle.tick()
        assert handle.settled

    def test_elapsed_before_first_tick(self, six_nodes):
        """An idle handle reports no elapsed time"""
        nodes, links = six_nodes
        clock = FakeClock()
        handle = LayoutSimulation.start(nodes, links, 800, 600, LayoutConfig(), clock=clock)
        clock.advance(30.0)
        assert handle.elapsed_ms() == 0.0
        assert handle.is_running

    def test_tick_budget(self, six_nodes):
        """cooldown_ticks caps the number of ticks"""
        nodes, links = six_nodes
        config = LayoutConfig(cooldown_time_ms=None, cooldown_ticks=10)
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        frame = handle.run_until_settled()
        assert frame.tick == 10

    def test_settled_handle_frozen(self, six_nodes):
        """Ticks after settling return the last frame unchanged"""
        nodes, links = six_nodes
        config = LayoutConfig(cooldown_time_ms=None, cooldown_ticks=3)
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        last = handle.run_until_settled()
        assert handle.tick() is last


class TestHandle:
    """Tests for SimulationHandle lifecycle and callbacks"""

    def test_callbacks(self, six_nodes):
        """Tick callbacks fire every tick, settled callbacks once"""
        nodes, links = six_nodes
        config = LayoutConfig(cooldown_time_ms=None, cooldown_ticks=5)
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)

        ticks = []
        settled = []
        handle.on_tick(lambda frame: ticks.append(frame.tick))
        handle.on_settled(settled.append)
        handle.run_until_settled()

        assert ticks == [1, 2, 3, 4, 5]
        assert len(settled) == 1
        assert settled[0].settled

    def test_stop(self, six_nodes, config):
        """Stopped handles never tick again"""
        nodes, links = six_nodes
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        handle.tick()
        handle.stop()

        assert handle.state == SimulationState.STOPPED
        assert handle.tick().tick == 1
        handle.stop()  # idempotent

    def test_run_stopped_raises(self, six_nodes, config):
        """Awaiting a stopped handle is a programming error"""
        nodes, links = six_nodes
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        handle.stop()
        with pytest.raises(RuntimeError):
            asyncio.run(handle.run(frame_interval=0))

    def test_async_run(self, six_nodes):
        """run() ticks cooperatively until settled"""
        nodes, links = six_nodes
        config = LayoutConfig(cooldown_time_ms=None, cooldown_ticks=20)
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        frame = asyncio.run(handle.run(frame_interval=0))
        assert frame.tick == 20
        assert handle.settled

    def test_max_ticks(self, six_nodes, config):
        """run_until_settled honours max_ticks"""
        nodes, links = six_nodes
        handle = LayoutSimulation.start(nodes, links, 800, 600, config)
        frame = handle.run_until_settled(max_ticks=7)
        assert frame.tick == 7
        assert handle.is_running


class TestDiagnostics:
    """Tests for the overlap diagnostic"""

    def test_radius_threshold(self):
        """Pairs closer than their radius sum are reported"""
        points = np.array([[0.0, 0.0], [15.0, 0.0], [100.0, 0.0]])
        overlaps = find_overlaps(["a", "b", "c"], points, radii=[10, 10, 10])
        assert [(o.node_a, o.node_b) for o in overlaps] == [("a", "b")]
        assert overlaps[0].depth == pytest.approx(5)

    def test_uniform_spacing(self):
        """min_spacing overrides the radii"""
        points = np.array([[0.0, 0.0], [15.0, 0.0]])
        assert find_overlaps(["a", "b"], points, radii=[10, 10], min_spacing=12) == []

    def test_sorted_by_depth(self):
        """Deepest overlaps come first"""
        points = np.array([[0.0, 0.0], [5.0, 0.0], [14.0, 0.0]])
        overlaps = find_overlaps(["a", "b", "c"], points, min_spacing=10)
        assert [o.depth for o in overlaps] == sorted((o.depth for o in overlaps), reverse=True)

    def test_needs_threshold(self):
        """Either radii or min_spacing must be given"""
        with pytest.raises(ValueError):
            find_overlaps(["a", "b"], np.zeros((2, 2)))

    def test_summary(self):
        """Summary lists involved nodes"""
        points = np.array([[0.0, 0.0], [5.0, 0.0]])
        summary = summarize_overlaps(find_overlaps(["a", "b"], points, min_spacing=10))
        assert summary["count"] == 1
        assert summary["nodes"] == ["a", "b"]
        assert summarize_overlaps([])["count"] == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Session Tests
Wiring of progress, layout restarts, hover and rendering in one view.

Run with: python -m pytest tests/test_session.py -v
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from skilltree.config import ROOT_ID, LayoutConfig
from skilltree.skills.manager import SkillTreeSession
from skilltree.skills.progression import ProgressRecord
from skilltree.skills.taxonomy import GraphModel
from skilltree.simulation.layout import seed_positions

from tests.test_taxonomy import make_taxonomy
from tests.test_renderer import RecordingSurface
from tests.test_layout import FakeClock


@pytest.fixture
def session():
    """Two-domain session with the first domain open"""
    return SkillTreeSession(
        graph=GraphModel.build(make_taxonomy()),
        layout_config=LayoutConfig(cooldown_time_ms=None),
    )


class TestSessionProgress:
    """Tests for activation and progress callbacks"""

    def test_starts_with_first_domain(self, session):
        """Default progress opens the first domain"""
        assert session.progress == ProgressRecord.of(["D1"])
        assert [n.id for n in session.visible_nodes()] == [ROOT_ID, "D1"]

    def test_activate_unlockable(self, session):
        """Activation unlocks and shows the node"""
        assert session.activate("D1_module_0")
        assert "D1_module_0" in session.progress
        assert "D1_module_0" in [n.id for n in session.visible_nodes()]

    def test_activate_locked_is_noop(self, session):
        """Locked nodes ignore activation and keep the running layout"""
        handle = session.handle
        assert not session.activate("D2_module_0")
        assert session.handle is handle
        assert handle.is_running

    def test_activation_restarts_layout(self, session):
        """A new visible node means a fresh simulation"""
        old = session.handle
        session.activate("D1_module_0")
        assert old.stopped
        assert session.handle is not old
        assert "D1_module_0" in session.handle.positions

    def test_progress_callback(self, session):
        """Each new record is reported once"""
        seen = []
        session.on_progress_change(seen.append)
        session.activate("D1_module_0")
        session.activate("D1_module_0")
        assert seen == [ProgressRecord.of(["D1", "D1_module_0"])]

    def test_root_cascade_shows_everything(self, session):
        """Activating the root reveals the whole graph"""
        session.activate(ROOT_ID)
        assert len(session.visible_nodes()) == len(session.graph)
        assert session.summary()["completion"] == 1.0

    def test_frontier_mode(self):
        """show_frontier adds unlockable nodes to the view"""
        session = SkillTreeSession(
            graph=GraphModel.build(make_taxonomy()),
            layout_config=LayoutConfig(cooldown_time_ms=None),
            show_frontier=True,
        )
        ids = [n.id for n in session.visible_nodes()]
        assert ids == [ROOT_ID, "D1", "D1_module_0", "D1_module_1"]


class TestSessionLayout:
    """Tests for layout ownership"""

    def test_resize_restarts_from_fresh_seed(self, session):
        """New dimensions reseed every node, pinned ones included"""
        session.activate("D1_module_0")
        session.handle.run_until_settled(max_ticks=30)
        old = session.handle

        handle = session.resize(400, 300)
        assert old.stopped
        assert handle is not old
        assert handle.frame.tick == 0

        fresh = seed_positions(session.visible_nodes(), 400, 300, session.layout_config)
        assert handle.positions == fresh

    def test_same_size_keeps_layout(self, session):
        """Resizing to the current size is not a restart"""
        handle = session.handle
        assert session.resize(session.width, session.height) is handle

    def test_invalid_resize(self, session):
        """Non-positive dimensions are rejected"""
        with pytest.raises(ValueError):
            session.resize(0, 300)

    def test_tick(self, session):
        """tick advances the owned handle"""
        assert session.tick().tick == 1

    def test_idle_time_not_counted(self):
        """With the default wall-clock budget, waiting before the first tick does not settle the layout"""
        clock = FakeClock()
        session = SkillTreeSession(graph=GraphModel.build(make_taxonomy()), layout_config=LayoutConfig(), clock=clock)
        session.activate("D1_module_0")
        session.activate("D1_module_1")

        clock.advance(6.0)
        session.tick()
        assert session.handle.is_running

        session.tick()
        clock.advance(5.0)
        session.tick()
        assert session.handle.settled

    def test_close(self, session):
        """close stops the simulation"""
        session.close()
        assert session.handle.stopped


class TestSessionPointer:
    """Tests for hover and rendering"""

    def test_hover_visible(self, session):
        """Hovering a visible node highlights it"""
        node = session.hover("D1")
        assert node.id == "D1"
        assert session.hovered_id == "D1"
        assert session.tooltip()["name"] == "Domain 1"

    def test_hover_hidden_clears(self, session):
        """Hidden or unknown nodes clear the highlight"""
        session.hover("D1")
        assert session.hover("D2") is None
        assert session.hovered_id is None
        session.hover("D1")
        session.hover(None)
        assert session.tooltip() is None

    def test_render(self, session):
        """Render paints every visible node"""
        session.activate("D1_module_0")
        session.tick()
        surface = RecordingSurface()
        stats = session.render(surface)
        assert stats.nodes_drawn == 3
        assert stats.links_drawn == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

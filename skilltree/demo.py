#!/usr/bin/env python3
"""
Skill Tree - Demo Script

Walks the built-in taxonomy through a few unlocks, settles the layout and
writes a snapshot of the graph.
"""
import logging
import time

from skilltree.config import LayoutConfig
from skilltree.skills.manager import SkillTreeSession
from skilltree.render.visualizer import SkillGraphVisualizer


logger = logging.getLogger(__name__)


def print_session_statistics(session: SkillTreeSession):
    """Print progress and layout statistics"""
    summary = session.summary()
    frame = session.handle.frame

    print("\n" + "="*60)
    print(" SKILL TREE STATE")
    print("="*60)

    print(f"\nProgress:")
    print(f"  Unlocked: {summary['unlocked']} / {summary['total']}")
    print(f"  Completion: {summary['completion']*100:.0f}%")
    print(f"  Unlockable next: {', '.join(summary['unlockable']) or 'none'}")

    print(f"\nSkill profile:")
    for skill, value in summary["skill_profile"].items():
        print(f"  {skill.replace('_', ' '):<30} {value:>5.1f}")

    print(f"\nLayout:")
    print(f"  Visible nodes: {len(frame.positions)}")
    print(f"  Ticks: {frame.tick} (alpha {frame.alpha:.4f})")
    print(f"  State: {session.handle.state.value}")
    print(f"  Overlapping pairs: {len(session.handle.overlaps)}")

    print("\n" + "="*60)


def unlock_path(session: SkillTreeSession, node_ids: list[str]):
    """Activate nodes in order, reporting each outcome"""
    for node_id in node_ids:
        changed = session.activate(node_id)
        mark = "✓" if changed else "✗"
        print(f"  {mark} {node_id}")


def run_demo(width: float = 800, height: float = 600, output_dir: str = "visualizations"):
    """
    Run the demo session.

    Args:
        width: Canvas width
        height: Canvas height
        output_dir: Where the snapshot is written
    """
    print("="*60)
    print(" SKILL TREE DEMO")
    print("="*60)

    session = SkillTreeSession(
        width=width,
        height=height,
        layout_config=LayoutConfig(cooldown_time_ms=None),
    )
    session.on_progress_change(
        lambda record: logger.info(f"Progress now {len(record.unlocked_ids)} nodes")
    )

    domains = session.graph.domains()
    print(f"\nTaxonomy: {session.graph.title}")
    print(f"  Domains: {len(domains)}")
    print(f"  Nodes: {len(session.graph)}")

    print(f"\nUnlocking a path...\n")
    first = domains[0]
    path = [module.id for module in session.graph.modules_of(first.id)[:2]]
    if len(domains) > 1:
        path.append(domains[1].id)
        path.extend(module.id for module in session.graph.modules_of(domains[1].id)[:1])
    if len(domains) > 2:
        # Still gated: nothing of the second domain's successor is open
        path.append(session.graph.modules_of(domains[2].id)[0].id)
    unlock_path(session, path)

    print(f"\nSettling layout...")
    start_time = time.time()
    session.handle.run_until_settled(max_ticks=2000)
    elapsed_time = time.time() - start_time
    print(f"\n✓ Layout settled in {elapsed_time:.2f} seconds")

    print_session_statistics(session)

    visualizer = SkillGraphVisualizer(output_dir)
    path = visualizer.visualize(
        session.annotated_nodes(),
        session.visible_links(),
        session.handle.positions,
        session.width,
        session.height,
        filename="skill_tree_demo.png",
    )
    print(f"\n✓ Snapshot saved to: {path}")

    session.close()
    return session


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    print("\n" + "="*60)
    print("\nSKILL TREE - DEMO")
    print("\n" + "="*60 + "\n")

    run_demo(width=800, height=600)
    print("\n✓ Demo completed successfully!")

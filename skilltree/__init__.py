"""
Skill Tree - Progressive Skill Graph
Interactive radial skill map with unlock rules and force-directed layout.

This package provides:
- A taxonomy-driven graph of domains and modules under one root
- Unlock rules that gate modules behind their domain and domains behind
  their predecessor
- A force simulation placing the visible subgraph on concentric rings
- A renderer painting the graph with progressive disclosure of names
"""

from skilltree.skills.taxonomy import GraphModel, SkillNode, SkillLink
from skilltree.skills.progression import ProgressRecord, UnlockEngine, NodeState
from skilltree.skills.manager import SkillTreeSession
from skilltree.simulation.layout import LayoutSimulation, SimulationHandle
from skilltree.render.renderer import SkillGraphRenderer

__version__ = "0.1.0"
__all__ = [
    "GraphModel",
    "SkillNode",
    "SkillLink",
    "ProgressRecord",
    "UnlockEngine",
    "NodeState",
    "SkillTreeSession",
    "LayoutSimulation",
    "SimulationHandle",
    "SkillGraphRenderer",
]

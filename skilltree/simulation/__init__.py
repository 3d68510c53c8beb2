"""
Layout Simulation Module
Force-directed placement, simulation handles and overlap diagnostics.
"""

from skilltree.simulation.forces import (
    ForceState,
    Force,
    CenterForce,
    LinkForce,
    ManyBodyForce,
    CollideForce,
    RadialForce,
)
from skilltree.simulation.diagnostics import (
    Overlap,
    find_overlaps,
    summarize_overlaps,
)
from skilltree.simulation.layout import (
    SimulationState,
    NodePosition,
    LayoutFrame,
    LayoutSimulation,
    SimulationHandle,
    seed_positions,
    level_radii,
)

__all__ = [
    "ForceState",
    "Force",
    "CenterForce",
    "LinkForce",
    "ManyBodyForce",
    "CollideForce",
    "RadialForce",
    "Overlap",
    "find_overlaps",
    "summarize_overlaps",
    "SimulationState",
    "NodePosition",
    "LayoutFrame",
    "LayoutSimulation",
    "SimulationHandle",
    "seed_positions",
    "level_radii",
]

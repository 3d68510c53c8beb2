"""
Layout Diagnostics
Overlap detection for settled layouts. Read-only: never moves a node.
"""

from typing import Optional, List, Dict, Any, Sequence
from dataclasses import dataclass

import numpy as np
from scipy.spatial.distance import pdist


@dataclass(frozen=True)
class Overlap:
    """Two nodes closer than their allowed spacing"""
    node_a: str
    node_b: str
    distance: float
    threshold: float

    @property
    def depth(self) -> float:
        """How far inside the threshold the pair is"""
        return self.threshold - self.distance

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_a": self.node_a,
            "node_b": self.node_b,
            "distance": self.distance,
            "threshold": self.threshold,
            "depth": self.depth,
        }


def find_overlaps(
    ids: Sequence[str],
    points: np.ndarray,
    radii: Optional[Sequence[float]] = None,
    min_spacing: Optional[float] = None,
) -> List[Overlap]:
    """
    Report every pair of nodes closer than allowed.

    The threshold of a pair is min_spacing when given, otherwise the sum
    of both collision radii.

    Args:
        ids: Node ids, aligned with points
        points: (n, 2) array of positions
        radii: Per-node collision radius
        min_spacing: Uniform spacing overriding the radii

    Returns:
        Overlaps sorted by depth, deepest first
    """
    n = len(ids)
    if n < 2:
        return []
    if radii is None and min_spacing is None:
        raise ValueError("find_overlaps needs radii or min_spacing")

    distances = pdist(np.asarray(points, dtype=float))
    first, second = np.triu_indices(n, k=1)

    if min_spacing is not None:
        thresholds = np.full(distances.shape, float(min_spacing))
    else:
        radii = np.asarray(radii, dtype=float)
        thresholds = radii[first] + radii[second]

    overlaps = [
        Overlap(ids[i], ids[j], float(d), float(t))
        for i, j, d, t in zip(first, second, distances, thresholds)
        if d < t
    ]
    overlaps.sort(key=lambda o: o.depth, reverse=True)
    return overlaps


def summarize_overlaps(overlaps: List[Overlap]) -> Dict[str, Any]:
    """Compact stats for logging"""
    if not overlaps:
        return {"count": 0, "max_depth": 0.0, "nodes": []}

    nodes = sorted({o.node_a for o in overlaps} | {o.node_b for o in overlaps})
    return {
        "count": len(overlaps),
        "max_depth": max(o.depth for o in overlaps),
        "nodes": nodes,
    }

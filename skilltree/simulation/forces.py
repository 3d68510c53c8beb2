"""
Layout Forces
Velocity-Verlet style forces for the skill graph layout.

Each force reads positions and nudges velocities (the centering force
moves positions directly), scaled by the simulation's current alpha.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np


@dataclass
class ForceState:
    """Mutable per-simulation arrays (private to one simulation)"""
    positions: np.ndarray  # (n, 2)
    velocities: np.ndarray  # (n, 2)
    rng: np.random.Generator

    @property
    def count(self) -> int:
        return self.positions.shape[0]

    def jiggle(self, size=None) -> np.ndarray:
        """Tiny random offset used to separate coincident points"""
        return (self.rng.random(size) - 0.5) * 1e-6


class Force(ABC):
    """Base class for all layout forces"""

    @abstractmethod
    def apply(self, state: ForceState, alpha: float) -> None:
        """
        Apply the force for one tick.

        Args:
            state: Simulation arrays to update in place
            alpha: Current simulation energy
        """
        pass


class CenterForce(Force):
    """Shifts the whole layout so its mean moves toward a center point"""

    def __init__(self, x: float, y: float, strength: float = 1.0):
        self.center = np.array([x, y], dtype=float)
        self.strength = strength

    def apply(self, state: ForceState, alpha: float) -> None:
        if state.count == 0:
            return
        shift = (state.positions.mean(axis=0) - self.center) * self.strength
        state.positions -= shift


class LinkForce(Force):
    """
    Spring between linked nodes toward a target separation.

    The correction is split by degree so that a highly connected node
    moves less than a leaf.
    """

    def __init__(
        self,
        links: List[Tuple[int, int]],
        count: int,
        distance: float,
        strength: float = 0.5,
    ):
        """
        Initialize link force.

        Args:
            links: (source index, target index) pairs
            count: Number of nodes
            distance: Target separation
            strength: Spring stiffness
        """
        self.links = links
        self.distance = distance
        self.strength = strength

        degree = np.zeros(count, dtype=float)
        for source, target in links:
            degree[source] += 1
            degree[target] += 1
        self.bias = [
            degree[source] / (degree[source] + degree[target])
            for source, target in links
        ]

    def apply(self, state: ForceState, alpha: float) -> None:
        pos = state.positions
        vel = state.velocities

        for (source, target), bias in zip(self.links, self.bias):
            delta = pos[target] + vel[target] - pos[source] - vel[source]
            if delta[0] == 0:
                delta[0] = state.jiggle()
            if delta[1] == 0:
                delta[1] = state.jiggle()
            length = float(np.hypot(delta[0], delta[1]))
            k = (length - self.distance) / length * alpha * self.strength
            delta *= k
            vel[target] -= delta * bias
            vel[source] += delta * (1 - bias)


class ManyBodyForce(Force):
    """
    Pairwise repulsion (negative strength) or attraction.

    Computed exactly over all pairs; pairs farther apart than
    distance_max do not interact.
    """

    def __init__(
        self,
        strengths: np.ndarray,
        distance_max: float = np.inf,
        distance_min: float = 1.0,
    ):
        self.strengths = np.asarray(strengths, dtype=float)
        self.distance_max2 = distance_max * distance_max
        self.distance_min2 = distance_min * distance_min

    def apply(self, state: ForceState, alpha: float) -> None:
        n = state.count
        if n < 2:
            return
        pos = state.positions

        # delta[i, j] = pos[j] - pos[i]
        delta = pos[np.newaxis, :, :] - pos[:, np.newaxis, :]
        zero = delta == 0
        if zero.any():
            delta[zero] = state.jiggle(int(zero.sum()))
        dist2 = (delta ** 2).sum(axis=2)

        near = dist2 < self.distance_min2
        dist2 = np.where(near, np.sqrt(self.distance_min2 * dist2), dist2)

        weight = self.strengths[np.newaxis, :] * alpha / dist2
        weight[dist2 >= self.distance_max2] = 0.0
        np.fill_diagonal(weight, 0.0)

        state.velocities += (delta * weight[:, :, np.newaxis]).sum(axis=1)


class CollideForce(Force):
    """
    Keeps nodes at least radius_i + radius_j apart.

    Overlaps are resolved on the predicted positions (position + velocity),
    several passes per tick, sharing the correction by squared radius.
    """

    def __init__(
        self,
        radii: np.ndarray,
        strength: float = 1.0,
        iterations: int = 1,
    ):
        self.radii = np.asarray(radii, dtype=float)
        self.strength = strength
        self.iterations = iterations

    def apply(self, state: ForceState, alpha: float) -> None:
        n = state.count
        pos = state.positions
        vel = state.velocities
        radii = self.radii
        radii2 = radii ** 2

        for _ in range(self.iterations):
            for i in range(n - 1):
                predicted = pos[i] + vel[i]
                others = slice(i + 1, n)

                delta = predicted - pos[others] - vel[others]
                reach = radii[i] + radii[others]
                dist2 = (delta ** 2).sum(axis=1)
                hit = dist2 < reach ** 2
                if not hit.any():
                    continue

                delta = delta[hit]
                reach = reach[hit]
                zero = delta == 0
                if zero.any():
                    delta[zero] = state.jiggle(int(zero.sum()))
                length = np.hypot(delta[:, 0], delta[:, 1])

                push = delta * ((reach - length) / length * self.strength)[:, np.newaxis]
                share = radii2[others][hit] / (radii2[i] + radii2[others][hit])

                vel[i] += (push * share[:, np.newaxis]).sum(axis=0)
                hit_index = np.arange(i + 1, n)[hit]
                vel[hit_index] -= push * (1 - share)[:, np.newaxis]


class RadialForce(Force):
    """Pulls each node toward a target distance from a center point"""

    def __init__(
        self,
        radii: np.ndarray,
        x: float,
        y: float,
        strength: float = 0.1,
    ):
        self.radii = np.asarray(radii, dtype=float)
        self.center = np.array([x, y], dtype=float)
        self.strength = strength

    def apply(self, state: ForceState, alpha: float) -> None:
        if state.count == 0:
            return
        delta = state.positions - self.center
        delta[delta == 0] = 1e-6
        dist = np.hypot(delta[:, 0], delta[:, 1])
        k = (self.radii - dist) * self.strength * alpha / dist
        state.velocities += delta * k[:, np.newaxis]

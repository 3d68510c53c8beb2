"""
Skill Unlock System
Prerequisite state machine and immutable progress records.
"""

from typing import Optional, List, Dict, Any, Iterable
from dataclasses import dataclass, field
from enum import Enum
import logging

from skilltree.config import ROOT_ID, NodeLevel
from skilltree.skills.taxonomy import GraphModel, SkillNode, SkillPoints


logger = logging.getLogger(__name__)


class NodeState(str, Enum):
    """Unlock state of a node (Locked -> Unlockable -> Unlocked)"""
    LOCKED = "locked"
    UNLOCKABLE = "unlockable"
    UNLOCKED = "unlocked"


STATUS_LABELS = {
    NodeState.UNLOCKED: "Unlocked",
    NodeState.UNLOCKABLE: "Available - double-click to unlock",
    NodeState.LOCKED: "Locked",
}


def status_label(state: NodeState) -> str:
    """Human readable status for tooltips"""
    return STATUS_LABELS[state]


@dataclass(frozen=True)
class ProgressRecord:
    """
    Set of unlocked node ids.

    Owned by an external store; never mutated. Every unlock produces a
    new record.
    """
    unlocked_ids: frozenset = field(default_factory=frozenset)

    @classmethod
    def of(cls, ids: Iterable[str]) -> "ProgressRecord":
        return cls(frozenset(ids))

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.unlocked_ids

    def with_unlocked(self, *node_ids: str) -> "ProgressRecord":
        """New record with extra ids unlocked"""
        return ProgressRecord(self.unlocked_ids.union(node_ids))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (ids sorted for stable storage)"""
        return {"unlocked_ids": sorted(self.unlocked_ids)}

    @classmethod
    def from_dict(cls, data: Any) -> "ProgressRecord":
        """
        Create from dictionary.

        Anything that is not a list of strings is dropped rather than
        rejected so a corrupt saved record still loads.
        """
        if not isinstance(data, dict):
            return cls()
        raw = data.get("unlocked_ids", [])
        if not isinstance(raw, (list, tuple)):
            return cls()
        return cls(frozenset(item for item in raw if isinstance(item, str)))


@dataclass(frozen=True)
class AnnotatedNode:
    """A node together with its derived unlock flags"""
    node: SkillNode
    state: NodeState

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def level(self) -> NodeLevel:
        return self.node.level

    @property
    def is_unlocked(self) -> bool:
        return self.state == NodeState.UNLOCKED

    @property
    def can_unlock(self) -> bool:
        return self.state == NodeState.UNLOCKABLE

    def to_dict(self) -> Dict[str, Any]:
        data = self.node.to_dict()
        data["state"] = self.state.value
        data["is_unlocked"] = self.is_unlocked
        data["can_unlock"] = self.can_unlock
        return data


class UnlockEngine:
    """
    Derives unlock state from the graph structure and a progress record.

    Rules:
    - The root is always unlocked
    - A module can be unlocked once its owning domain is unlocked
    - A domain can be unlocked if it is the first domain, or if any module
      of the previous domain is unlocked
    - Unlocking the entry node unlocks every node at once

    Nothing is cached: flags are recomputed for every record.
    """

    def __init__(self, graph: GraphModel, entry_id: str = ROOT_ID):
        """
        Initialize unlock engine.

        Args:
            graph: Skill graph
            entry_id: Node whose unlock cascades to the whole graph
        """
        self.graph = graph
        self.entry_id = entry_id

    def initial_progress(self) -> ProgressRecord:
        """Starting record: the first domain is open"""
        domains = self.graph.domains()
        if not domains:
            return ProgressRecord()
        return ProgressRecord.of([domains[0].id])

    # ==================== Queries ====================

    def is_unlocked(self, node_id: str, progress: ProgressRecord) -> bool:
        """Check if a node is unlocked"""
        if node_id == ROOT_ID:
            return node_id in self.graph
        return node_id in progress.unlocked_ids and node_id in self.graph

    def can_unlock(self, node_id: str, progress: ProgressRecord) -> bool:
        """
        Check if a node's prerequisites are met.

        Already unlocked and unknown nodes are never unlockable.
        """
        node = self.graph.get_node(node_id)
        if node is None or self.is_unlocked(node_id, progress):
            return False

        if node.level == NodeLevel.MODULE:
            return node.group_id in progress.unlocked_ids

        if node.level == NodeLevel.DOMAIN:
            previous = self.graph.previous_domain(node_id)
            if previous is None:
                return True
            return any(
                module.id in progress.unlocked_ids
                for module in self.graph.modules_of(previous.id)
            )

        return False

    def state_of(self, node_id: str, progress: ProgressRecord) -> NodeState:
        """Get the state of a node"""
        if self.is_unlocked(node_id, progress):
            return NodeState.UNLOCKED
        if self.can_unlock(node_id, progress):
            return NodeState.UNLOCKABLE
        return NodeState.LOCKED

    def annotate(
        self,
        progress: ProgressRecord,
        nodes: Optional[Iterable[SkillNode]] = None,
    ) -> List[AnnotatedNode]:
        """
        Attach derived state to nodes.

        Args:
            progress: Current record
            nodes: Nodes to annotate (all nodes if None)
        """
        if nodes is None:
            nodes = self.graph.nodes
        return [AnnotatedNode(node, self.state_of(node.id, progress)) for node in nodes]

    def unlockable_ids(self, progress: ProgressRecord) -> List[str]:
        """Ids currently unlockable, in graph order"""
        return [node.id for node in self.graph.nodes if self.can_unlock(node.id, progress)]

    # ==================== Transitions ====================

    def unlock(self, node_id: str, progress: ProgressRecord) -> ProgressRecord:
        """
        Unlock a node.

        Returns the input record unchanged when the node cannot be unlocked.

        Args:
            node_id: Node to unlock
            progress: Current record

        Returns:
            New record (or the same one for a no-op)
        """
        if node_id == self.entry_id and node_id in self.graph:
            everything = frozenset(n.id for n in self.graph.nodes if n.id != ROOT_ID)
            cascaded = ProgressRecord(progress.unlocked_ids | everything)
            if cascaded != progress:
                logger.info(f"Entry node {node_id} unlocked, cascading to {len(everything)} nodes")
            return cascaded

        if not self.can_unlock(node_id, progress):
            logger.debug(f"Ignored unlock of {node_id}: prerequisites not met or already unlocked")
            return progress

        logger.info(f"Unlocked {node_id}")
        return progress.with_unlocked(node_id)

    # ==================== Summaries ====================

    def skill_profile(self, progress: ProgressRecord) -> SkillPoints:
        """Sum of skill points over unlocked nodes"""
        total = SkillPoints()
        for node in self.graph.nodes:
            if self.is_unlocked(node.id, progress):
                total = total + node.skill_points
        return total

    def completion(self, progress: ProgressRecord) -> float:
        """Fraction of non-root nodes unlocked (0.0-1.0)"""
        others = [n for n in self.graph.nodes if n.id != ROOT_ID]
        if not others:
            return 1.0
        unlocked = sum(1 for n in others if n.id in progress.unlocked_ids)
        return unlocked / len(others)

"""
Skill Graph Module
Taxonomy graph, unlock rules and view sessions.
"""

from skilltree.skills.taxonomy import (
    SkillPoints,
    SkillNode,
    SkillLink,
    GraphModel,
    get_default_taxonomy,
    build_skill_graph,
)
from skilltree.skills.progression import (
    NodeState,
    ProgressRecord,
    AnnotatedNode,
    UnlockEngine,
    status_label,
)
from skilltree.skills.manager import SkillTreeSession

__all__ = [
    "SkillPoints",
    "SkillNode",
    "SkillLink",
    "GraphModel",
    "get_default_taxonomy",
    "build_skill_graph",
    "NodeState",
    "ProgressRecord",
    "AnnotatedNode",
    "UnlockEngine",
    "status_label",
    "SkillTreeSession",
]

# API Services
from api.services.skill_tree_service import SkillTreeService

__all__ = [
    "SkillTreeService",
]

"""
Skill Taxonomy
Skill graph built from a taxonomy of domains and modules.
"""

from typing import Optional, List, Dict, Any, Mapping, Iterable
from dataclasses import dataclass, field

from skilltree.config import (
    ROOT_ID,
    ROOT_NAME,
    SKILL_DIMENSIONS,
    DOMAIN_LINK_WEIGHT,
    MODULE_LINK_WEIGHT,
    NodeLevel,
)


@dataclass(frozen=True)
class SkillPoints:
    """Score of a node on the five skill dimensions"""
    problem_solving: float = 0.0
    coding_implementation: float = 0.0
    systems_thinking: float = 0.0
    collaboration_communication: float = 0.0
    learning_adaptability: float = 0.0

    @classmethod
    def from_raw(cls, raw: Any) -> "SkillPoints":
        """
        Build from an untrusted mapping.

        Missing dimensions, non-numeric values and non-mapping input all
        default to zero.
        """
        if not isinstance(raw, Mapping):
            return cls()

        values = {}
        for dimension in SKILL_DIMENSIONS:
            value = raw.get(dimension, 0)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                value = 0
            values[dimension] = float(value)
        return cls(**values)

    def __add__(self, other: "SkillPoints") -> "SkillPoints":
        return SkillPoints(**{
            dim: getattr(self, dim) + getattr(other, dim)
            for dim in SKILL_DIMENSIONS
        })

    def items(self) -> List[tuple[str, float]]:
        """(dimension, value) pairs in canonical order"""
        return [(dim, getattr(self, dim)) for dim in SKILL_DIMENSIONS]

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary"""
        return dict(self.items())


@dataclass(frozen=True)
class SkillNode:
    """
    A node of the skill graph.

    Nodes are structural only: unlock state is derived from a
    ProgressRecord and positions are owned by the layout simulation.
    """
    id: str
    name: str
    description: str = ""
    level: NodeLevel = NodeLevel.MODULE
    group_id: str = ROOT_ID
    skill_points: SkillPoints = field(default_factory=SkillPoints)

    # Module detail
    key_actions: tuple[str, ...] = ()
    concepts: tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "level": int(self.level),
            "group_id": self.group_id,
            "skill_points": self.skill_points.to_dict(),
            "key_actions": list(self.key_actions),
            "concepts": list(self.concepts),
        }


@dataclass(frozen=True)
class SkillLink:
    """Structural edge (root -> domain, domain -> module)"""
    source_id: str
    target_id: str
    weight: int = MODULE_LINK_WEIGHT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_id": self.source_id,
            "target_id": self.target_id,
            "weight": self.weight,
        }


def module_id(domain_id: str, index: int) -> str:
    """Id of the index-th module of a domain"""
    return f"{domain_id}_module_{index}"


def _title_part(title: str, index: int) -> str:
    """
    Extract the name from a numbered title.

    "2. Build Web Apps (Full stack)" -> index 1 -> "Build Web Apps (Full stack)"
    "2.1. Make an Interface" -> index 2 -> "Make an Interface"

    Falls back to the whole title when it has no such part.
    """
    parts = title.split(".")
    if len(parts) > index:
        name = parts[index].strip()
        if name:
            return name
    return title.strip()


def _first(entry: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key out of English/French spellings"""
    for key in keys:
        if key in entry and entry[key] is not None:
            return entry[key]
    return default


def _strings(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    return tuple(str(item) for item in raw)


class GraphModel:
    """
    Node/link set of a skill taxonomy.

    Built once per taxonomy load and read-only afterwards:
    - Root node (level 0)
    - Domains (level 1), linked from the root
    - Modules (level 2), linked from their owning domain
    """

    def __init__(
        self,
        nodes: Iterable[SkillNode],
        links: Iterable[SkillLink],
        title: str = "",
    ):
        """
        Initialize graph.

        Args:
            nodes: Nodes, root first, then domains each followed by its modules
            links: Structural links
            title: Taxonomy title
        """
        self.title = title
        self._nodes: Dict[str, SkillNode] = {}
        self._order: List[str] = []
        self._links: List[SkillLink] = list(links)
        self._children: Dict[str, List[str]] = {}
        self._parent: Dict[str, str] = {}
        self._domains: List[str] = []

        for node in nodes:
            self._nodes[node.id] = node
            self._order.append(node.id)
            if node.level == NodeLevel.DOMAIN:
                self._domains.append(node.id)

        for link in self._links:
            self._children.setdefault(link.source_id, []).append(link.target_id)
            self._parent[link.target_id] = link.source_id

    @classmethod
    def build(cls, taxonomy: Mapping[str, Any]) -> "GraphModel":
        """
        Build the graph from a parsed taxonomy.

        Accepts both the English keys (title, domains, modules, skill_points,
        key_actions, concepts) and the French ones (titre_parcours,
        domaines_principaux, titre, actions_cles, concepts_acquis).

        Args:
            taxonomy: Nested mapping of domains and modules

        Returns:
            GraphModel
        """
        title = str(_first(taxonomy, "title", "titre_parcours", default=""))
        nodes: List[SkillNode] = [
            SkillNode(
                id=ROOT_ID,
                name=ROOT_NAME,
                description=title,
                level=NodeLevel.ROOT,
                group_id=ROOT_ID,
            )
        ]
        links: List[SkillLink] = []

        domains = _first(taxonomy, "domains", "domaines_principaux", default=[])
        if not isinstance(domains, list):
            domains = []

        for domain_index, domain in enumerate(domains):
            if not isinstance(domain, Mapping):
                continue
            domain_id = str(_first(domain, "id", default=f"domain_{domain_index}"))
            domain_title = str(_first(domain, "title", "titre", default=domain_id))

            nodes.append(SkillNode(
                id=domain_id,
                name=_title_part(domain_title, 1),
                description=domain_title,
                level=NodeLevel.DOMAIN,
                group_id=domain_id,
            ))
            links.append(SkillLink(ROOT_ID, domain_id, DOMAIN_LINK_WEIGHT))

            modules = domain.get("modules", [])
            if not isinstance(modules, list):
                modules = []

            for index, module in enumerate(modules):
                if not isinstance(module, Mapping):
                    module = {}
                node_id = module_id(domain_id, index)
                module_title = str(_first(module, "title", "titre", default=node_id))

                nodes.append(SkillNode(
                    id=node_id,
                    name=_title_part(module_title, 2),
                    description=module_title,
                    level=NodeLevel.MODULE,
                    group_id=domain_id,
                    skill_points=SkillPoints.from_raw(module.get("skill_points")),
                    key_actions=_strings(_first(module, "key_actions", "actions_cles")),
                    concepts=_strings(_first(module, "concepts", "concepts_acquis")),
                ))
                links.append(SkillLink(domain_id, node_id, MODULE_LINK_WEIGHT))

        return cls(nodes, links, title=title)

    # ==================== Structure ====================

    @property
    def nodes(self) -> List[SkillNode]:
        """All nodes in build order"""
        return [self._nodes[nid] for nid in self._order]

    @property
    def links(self) -> List[SkillLink]:
        return list(self._links)

    @property
    def root(self) -> SkillNode:
        return self._nodes[ROOT_ID]

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> Optional[SkillNode]:
        """Get node by ID"""
        return self._nodes.get(node_id)

    def domains(self) -> List[SkillNode]:
        """Domains in taxonomy order"""
        return [self._nodes[did] for did in self._domains]

    def domain_index(self, domain_id: str) -> int:
        """Position of a domain in taxonomy order, -1 if not a domain"""
        try:
            return self._domains.index(domain_id)
        except ValueError:
            return -1

    def previous_domain(self, domain_id: str) -> Optional[SkillNode]:
        """Domain immediately before this one, None for the first"""
        index = self.domain_index(domain_id)
        if index <= 0:
            return None
        return self._nodes[self._domains[index - 1]]

    def modules_of(self, domain_id: str) -> List[SkillNode]:
        """Modules owned by a domain"""
        return [
            self._nodes[cid]
            for cid in self._children.get(domain_id, [])
            if self._nodes[cid].level == NodeLevel.MODULE
        ]

    def children_of(self, node_id: str) -> List[SkillNode]:
        return [self._nodes[cid] for cid in self._children.get(node_id, [])]

    def parent_of(self, node_id: str) -> Optional[SkillNode]:
        parent_id = self._parent.get(node_id)
        return self._nodes.get(parent_id) if parent_id else None

    # ==================== Visibility ====================

    def visible_nodes(self, progress: Any) -> List[SkillNode]:
        """
        Nodes shown for a progress record.

        Every unlocked node, plus the root which anchors the graph even
        before anything is unlocked.

        Args:
            progress: ProgressRecord (anything with an unlocked_ids set)
        """
        unlocked = progress.unlocked_ids
        return [
            self._nodes[nid]
            for nid in self._order
            if nid == ROOT_ID or nid in unlocked
        ]

    def visible_links(self, visible_nodes: Iterable[SkillNode]) -> List[SkillLink]:
        """Links whose both endpoints are visible"""
        visible_ids = {node.id for node in visible_nodes}
        return [
            link for link in self._links
            if link.source_id in visible_ids and link.target_id in visible_ids
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert graph to dictionary"""
        return {
            "title": self.title,
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [link.to_dict() for link in self._links],
        }


def get_default_taxonomy() -> Dict[str, Any]:
    """
    Get the built-in software engineering taxonomy.

    Four domains of three to four modules, each module scored on the
    five skill dimensions.
    """
    def module(title, points, actions=(), concepts=()):
        return {
            "title": title,
            "skill_points": dict(zip(SKILL_DIMENSIONS, points)),
            "key_actions": list(actions),
            "concepts": list(concepts),
        }

    return {
        "title": "Software Engineering Skill Path - Learning by Building",
        "domains": [
            {
                "id": "1_First_Programs",
                "title": "1. Write Your First Programs (Basics by Doing)",
                "modules": [
                    module(
                        "1.1. Automate Simple Tasks (Introduction to code)",
                        (2, 3, 1, 0, 3),
                        ["Write shell and Python scripts to handle files and text",
                         "Use a terminal and its basic commands"],
                        ["Variables", "Conditions", "Loops", "Functions", "I/O"],
                    ),
                    module(
                        "1.2. Build a Small Game or Utility in C (Low level)",
                        (4, 5, 2, 1, 3),
                        ["Manage memory by hand (malloc/free)",
                         "Compile and debug your code"],
                        ["Compilation", "Pointers", "Memory management"],
                    ),
                    module(
                        "1.3. Share and Version Your Code (Collaboration tools)",
                        (1, 2, 1, 4, 2),
                        ["Track changes with Git (commit, branch, merge)"],
                        ["Version control", "Branching", "Code review"],
                    ),
                ],
            },
            {
                "id": "2_Web_Applications",
                "title": "2. Build Complete Web Applications (Browser to Database)",
                "modules": [
                    module("2.1. Create an Interactive Web Interface (Front-End)", (2, 4, 2, 2, 3)),
                    module("2.2. Develop the Application Logic (Back-End)", (3, 4, 3, 1, 2)),
                    module("2.3. Store and Query Data (Databases)", (3, 3, 4, 1, 2)),
                    module("2.4. Put It All Together: Full-Stack Project", (4, 4, 4, 3, 3)),
                ],
            },
            {
                "id": "3_Industrial_Development",
                "title": "3. Industrialise Development (Working at Scale)",
                "modules": [
                    module("3.1. Write Quality Code and Test It", (3, 4, 2, 2, 2)),
                    module("3.2. Work Efficiently in a Team (Agile Methods)", (2, 1, 2, 5, 3)),
                    module("3.3. Automate the Delivery Chain (CI/CD & DevOps)", (3, 3, 4, 3, 3)),
                ],
            },
            {
                "id": "4_Infrastructure",
                "title": "4. Run the Underlying Infrastructure (Operating Applications)",
                "modules": [
                    module("4.1. Master the Linux Environment", (3, 3, 4, 1, 3)),
                    module("4.2. Understand and Configure Networks", (3, 2, 5, 1, 3)),
                    module("4.3. Virtualise and Containerise Applications", (3, 3, 4, 2, 3)),
                    module("4.4. Explore the Cloud and Orchestration", (3, 3, 5, 2, 4)),
                ],
            },
        ],
    }


def build_skill_graph() -> GraphModel:
    """Build the graph of the built-in taxonomy"""
    return GraphModel.build(get_default_taxonomy())

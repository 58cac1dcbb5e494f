"""
Skill Map - Manages the skill catalog and its prerequisite DAG.

Features:
    - Hierarchical structure (domain → cluster → skill)
    - Prerequisite relationships as directed edges (prerequisite → skill)
    - Transitive prerequisite lookup for the mastery gate
    - Learning-state-based visualization
"""

import json
import networkx as nx
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from loguru import logger


# Skill id prefix -> exam domain number
DOMAIN_PREFIXES = {
    "DBDM": 1, "CC": 2, "ACAD": 3, "MBH": 4, "SWP": 5,
    "PC": 6, "FSC": 7, "DIV": 8, "RES": 9, "LEG": 10
}


@dataclass
class Skill:
    """A testable skill from the catalog."""
    skill_id: str
    name: str
    description: str
    domain_id: int
    cluster_id: str = ""
    decision_rule: str = ""
    common_wrong_rules: List[str] = field(default_factory=list)
    dok_range: Tuple[int, int] = (1, 3)
    question_ids: List[str] = field(default_factory=list)
    prerequisites: List[str] = field(default_factory=list)


@dataclass
class Domain:
    """One exam domain with its skill clusters."""
    domain_id: int
    name: str
    short_name: str
    clusters: List[dict] = field(default_factory=list)


class SkillMap:
    """
    Directed Acyclic Graph of skills with prerequisites.

    Structure:
        Domain (e.g., "Data-Based Decision Making")
        └── Cluster (e.g., "Assessment Selection")
            └── Skill (e.g., "DBDM-S05 Assessment-Purpose Matching")
    """

    # Node colors per learning state (emerging → mastery)
    STATE_COLORS = {
        "emerging": "#ff6b6b",
        "developing": "#feca57",
        "proficient": "#48dbfb",
        "mastery": "#5cd85c"
    }

    def __init__(self, data_dir: str = None):
        """Load all domain files and build the graph."""
        if data_dir is None:
            from config import SKILL_DATA_DIR
            data_dir = SKILL_DATA_DIR

        self.data_dir = Path(data_dir)
        self.graph = nx.DiGraph()
        self.skills: Dict[str, Skill] = {}
        self.domains: Dict[int, Domain] = {}

        self._load_all_domains()

    def _load_all_domains(self):
        """Load skill data from all JSON files in the data directory."""
        if not self.data_dir.exists():
            logger.warning(f"Skill data directory not found: {self.data_dir}")
            return

        for domain_file in sorted(self.data_dir.glob("*.json")):
            with open(domain_file, 'r', encoding="utf-8") as f:
                data = json.load(f)
            self._load_domain(data)

        logger.debug(f"Loaded {len(self.skills)} skills across {len(self.domains)} domains")

    def _load_domain(self, data: dict):
        """Add one domain file's clusters and skills."""
        domain = Domain(
            domain_id=data["domain_id"],
            name=data.get("name", ""),
            short_name=data.get("short_name", ""),
            clusters=data.get("clusters", [])
        )
        self.domains[domain.domain_id] = domain

        for cluster in domain.clusters:
            for skill_data in cluster.get("skills", []):
                self._add_skill(skill_data, domain.domain_id, cluster.get("cluster_id", ""))

    def _add_skill(self, data: dict, domain_id: int, cluster_id: str):
        """Add a skill to the catalog and graph."""
        skill = Skill(
            skill_id=data["id"],
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            domain_id=domain_id,
            cluster_id=cluster_id,
            decision_rule=data.get("decision_rule", ""),
            common_wrong_rules=list(data.get("common_wrong_rules", [])),
            dok_range=tuple(data.get("dok_range", (1, 3))),
            question_ids=list(data.get("question_ids", [])),
            prerequisites=list(data.get("prerequisites", []))
        )
        self.skills[skill.skill_id] = skill
        self.graph.add_node(skill.skill_id, domain=domain_id)

        # Add prerequisite edges
        for prereq in skill.prerequisites:
            self.graph.add_edge(prereq, skill.skill_id)

    # ==================== Query Methods ====================

    def get_skill(self, skill_id: str) -> Optional[Skill]:
        """Get a skill by ID."""
        return self.skills.get(skill_id)

    def get_all_skills(self) -> List[str]:
        """Get all skill IDs, prerequisites first."""
        try:
            order = list(nx.topological_sort(self.graph))
        except nx.NetworkXUnfeasible:
            logger.warning("Prerequisite cycle detected; falling back to catalog order")
            order = list(self.graph.nodes)
        return [s for s in order if s in self.skills]

    def get_skills_for_domain(self, domain_id: int) -> List[Skill]:
        """Get every skill in a domain."""
        return [s for s in self.skills.values() if s.domain_id == domain_id]

    def get_domain(self, domain_id: int) -> Optional[Domain]:
        return self.domains.get(domain_id)

    def domain_for_skill(self, skill_id: str) -> Optional[int]:
        """Domain number for a skill: catalog first, then the id prefix."""
        skill = self.get_skill(skill_id)
        if skill:
            return skill.domain_id
        return DOMAIN_PREFIXES.get(skill_id.split("-")[0])

    def get_prerequisites(self, skill_id: str) -> List[str]:
        """Get immediate prerequisites (one level up)."""
        if skill_id not in self.graph:
            return []
        return list(self.graph.predecessors(skill_id))

    def get_all_prerequisites(self, skill_id: str) -> Set[str]:
        """Get ALL prerequisites recursively."""
        if skill_id not in self.graph:
            return set()
        return nx.ancestors(self.graph, skill_id)

    def get_dependents(self, skill_id: str) -> List[str]:
        """Get skills unlocked by this one (one level down)."""
        if skill_id not in self.graph:
            return []
        return list(self.graph.successors(skill_id))

    def get_all_dependents(self, skill_id: str) -> Set[str]:
        if skill_id not in self.graph:
            return set()
        return nx.descendants(self.graph, skill_id)

    # ==================== Visualization ====================

    def get_graph_visualization(self, states: Dict[str, str]) -> dict:
        """
        Generate nodes and edges for the progress dashboard.

        Args:
            states: skill_id -> learning state value ("emerging" ... "mastery")
        """
        nodes = []
        edges = []

        for skill_id, skill in self.skills.items():
            state = states.get(skill_id, "emerging")
            nodes.append({
                "id": skill_id,
                "label": skill.name,
                "domain": skill.domain_id,
                "color": self.STATE_COLORS.get(state, self.STATE_COLORS["emerging"]),
                "status": state
            })

        for source, target in self.graph.edges():
            edges.append({
                "source": source,
                "target": target
            })

        return {"nodes": nodes, "edges": edges}

    # ==================== Statistics ====================

    def get_stats(self) -> dict:
        """Get catalog statistics."""
        return {
            "total_skills": len(self.skills),
            "total_edges": self.graph.number_of_edges(),
            "domains": sorted(self.domains.keys()),
            "skills_per_domain": {d: len(self.get_skills_for_domain(d)) for d in sorted(self.domains)},
            "max_depth": nx.dag_longest_path_length(self.graph)
            if self.skills and nx.is_directed_acyclic_graph(self.graph) else 0
        }

"""Tests for the skill catalog and prerequisite graph."""

import json

from core.skill_map import SkillMap


def write_domain(directory, skills, domain_id=9, short_name="RES"):
    data = {
        "domain_id": domain_id,
        "name": "Test Domain",
        "short_name": short_name,
        "clusters": [{"cluster_id": f"{short_name}-A", "name": "Cluster", "skills": skills}]
    }
    (directory / f"{short_name.lower()}.json").write_text(json.dumps(data), encoding="utf-8")


class TestSkillMap:
    def test_loads_catalog(self, skill_map):
        stats = skill_map.get_stats()
        assert stats["total_skills"] == 15
        assert stats["skills_per_domain"] == {1: 6, 2: 2, 3: 1, 4: 3, 9: 1, 10: 2}
        assert stats["max_depth"] == 2

    def test_skill_fields(self, skill_map):
        skill = skill_map.get_skill("MBH-S02")
        assert skill.name == "Behavior Function Identification"
        assert skill.domain_id == 4
        assert skill.dok_range == (3, 4)
        assert skill_map.get_skill("NOPE-S01") is None

    def test_prerequisites(self, skill_map):
        assert skill_map.get_prerequisites("MBH-S03") == ["MBH-S02"]
        assert skill_map.get_all_prerequisites("MBH-S03") == {"MBH-S01", "MBH-S02"}
        assert skill_map.get_prerequisites("DBDM-S01") == []
        assert skill_map.get_all_prerequisites("NOPE-S01") == set()

    def test_dependents(self, skill_map):
        assert set(skill_map.get_dependents("DBDM-S05")) == {"DBDM-S08", "DBDM-S10"}
        assert skill_map.get_all_dependents("MBH-S01") == {"MBH-S02", "MBH-S03"}

    def test_topological_order(self, skill_map):
        order = skill_map.get_all_skills()
        assert len(order) == 15
        assert order.index("MBH-S01") < order.index("MBH-S02") < order.index("MBH-S03")
        assert order.index("CC-S01") < order.index("CC-S03")

    def test_domain_lookup(self, skill_map):
        assert skill_map.domain_for_skill("CC-S03") == 2
        assert skill_map.domain_for_skill("PC-S07") == 6
        assert skill_map.domain_for_skill("XYZ-S01") is None
        assert skill_map.get_domain(4).short_name == "MBH"

    def test_visualization_defaults_to_emerging(self, skill_map):
        viz = skill_map.get_graph_visualization({"MBH-S01": "mastery"})
        nodes = {n["id"]: n for n in viz["nodes"]}
        assert nodes["MBH-S01"]["status"] == "mastery"
        assert nodes["MBH-S01"]["color"] == SkillMap.STATE_COLORS["mastery"]
        assert nodes["MBH-S02"]["status"] == "emerging"
        assert {"source": "MBH-S01", "target": "MBH-S02"} in viz["edges"]


class TestSkillMapEdgeCases:
    def test_missing_directory(self, tmp_path):
        skill_map = SkillMap(str(tmp_path / "missing"))
        assert skill_map.skills == {}
        assert skill_map.get_all_skills() == []
        assert skill_map.get_stats()["max_depth"] == 0

    def test_prerequisite_outside_catalog(self, tmp_path):
        write_domain(tmp_path, [
            {"id": "RES-S01", "name": "Design", "prerequisites": ["RES-S00"]},
        ])
        skill_map = SkillMap(str(tmp_path))

        assert skill_map.get_all_skills() == ["RES-S01"]
        assert skill_map.get_all_prerequisites("RES-S01") == {"RES-S00"}

    def test_defaults(self, tmp_path):
        write_domain(tmp_path, [{"id": "RES-S01"}])
        skill = SkillMap(str(tmp_path)).get_skill("RES-S01")
        assert skill.name == "RES-S01"
        assert skill.dok_range == (1, 3)
        assert skill.cluster_id == "RES-A"

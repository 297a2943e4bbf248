"""Unit tests for fuzzy skill matching."""

from talentmatch.matching.skills import match_skills, missing_skills, skill_matches, skills_overlap


class TestSkillMatches:
    """Tests for the pairwise matching rule."""

    def test_substring_is_symmetric(self):
        assert skill_matches("java", "javascript")
        assert skill_matches("javascript", "java")

    def test_case_insensitive(self):
        assert skill_matches("REACT", "react.js")

    def test_abbreviation(self):
        assert skill_matches("js", "JavaScript")

    def test_permissive_single_letter(self):
        """Short skills match longer ones containing them."""
        assert skill_matches("c", "C++")

    def test_unrelated(self):
        assert not skill_matches("python", "kubernetes")


class TestMatchSkills:
    """Tests for matching a talent's skills against an offer's skills."""

    def test_returns_offer_skills_in_original_order_and_casing(self):
        matched = match_skills(["spring boot", "java"], ["Java", "Kubernetes", "Spring"])
        assert matched == ["Java", "Spring"]

    def test_empty_talent_skills(self):
        assert match_skills([], ["Java"]) == []

    def test_empty_offer_skills(self):
        assert match_skills(["Java"], []) == []

    def test_blank_entries_ignored(self):
        assert match_skills(["", "java"], ["", "Java"]) == ["Java"]

    def test_missing_skills(self):
        assert missing_skills(["java"], ["Java", "Kubernetes"]) == ["Kubernetes"]

    def test_skills_overlap(self):
        assert skills_overlap(["react"], ["React", "Node"])
        assert not skills_overlap(["cobol"], ["React", "Node"])
        assert not skills_overlap([], ["React"])

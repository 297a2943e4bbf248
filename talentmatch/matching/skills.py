"""Fuzzy skill matching shared by the score engine and the alert matcher.

Two skills match when either lower-cased string contains the other, so
"js" satisfies "javascript" and "java" satisfies "javascript". The rule is
deliberately permissive: "c" also satisfies "c++".
"""

from typing import Iterable, List


def skill_matches(a: str, b: str) -> bool:
    """Check bidirectional, case-insensitive substring containment."""
    a_lower = a.lower()
    b_lower = b.lower()
    return a_lower in b_lower or b_lower in a_lower


def match_skills(talent_skills: Iterable[str], offer_skills: Iterable[str]) -> List[str]:
    """Return the offer skills satisfied by at least one talent skill.

    Args:
        talent_skills: Skills held by the talent (or wanted by an alert)
        offer_skills: Skills listed on the offer

    Returns:
        Matching offer skills in their original casing and order
    """
    candidates = [skill for skill in talent_skills if skill]
    if not candidates:
        return []

    return [
        offer_skill
        for offer_skill in offer_skills
        if offer_skill and any(skill_matches(skill, offer_skill) for skill in candidates)
    ]


def missing_skills(talent_skills: Iterable[str], offer_skills: Iterable[str]) -> List[str]:
    """Return the offer skills no talent skill satisfies."""
    offer_skills = list(offer_skills)
    matched = set(match_skills(talent_skills, offer_skills))
    return [skill for skill in offer_skills if skill not in matched]


def skills_overlap(a: Iterable[str], b: Iterable[str]) -> bool:
    """Check whether any skill of ``a`` matches any skill of ``b``."""
    return bool(match_skills(a, b))

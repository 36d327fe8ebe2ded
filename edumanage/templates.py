"""
"AI" text templates.

There is no model behind this: course descriptions, instructor bios and course
recommendations are picked from canned templates with a bit of randomness.
Functions are pure apart from the random source, which callers may pass in
(seeded) for reproducible output.
"""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

from edumanage.model import ACTIVE

DESCRIPTIONS: Dict[str, List[str]] = {
    "Programming": [
        "Master the fundamentals of modern programming with hands-on projects and real-world applications.",
        "Develop advanced programming skills through comprehensive theory and practical implementation.",
        "Build robust applications using industry-standard practices and cutting-edge technologies.",
    ],
    "Data Science": [
        "Transform raw data into actionable insights using advanced analytics and machine learning.",
        "Master statistical analysis and predictive modeling for data-driven decision making.",
        "Develop expertise in data visualization and interpretation for business intelligence.",
    ],
    "Marketing": [
        "Create compelling marketing strategies that drive engagement and business growth.",
        "Master digital marketing channels and analytics to optimize campaign performance.",
        "Develop brand awareness and customer acquisition through proven marketing methodologies.",
    ],
    "Design": [
        "Create stunning visual experiences that engage users and communicate effectively.",
        "Master design principles and tools to build professional-grade creative solutions.",
        "Develop aesthetic sensibility and technical skills for impactful design work.",
    ],
}

LEVEL_MODIFIERS: Dict[str, str] = {
    "Beginner": "Perfect for those new to the field, this course provides a solid foundation and step-by-step guidance.",
    "Intermediate": (
        "Building on fundamental knowledge, this course dives deeper into advanced concepts and practical applications."
    ),
    "Advanced": (
        "Designed for experienced practitioners, this course covers cutting-edge techniques and industry best practices."
    ),
}

RECOMMENDATION_REASONS = [
    ("Based on enrollment patterns", 0.89),
    ("Complementary skill development", 0.85),
    ("Career advancement pathway", 0.78),
    ("Industry demand trends", 0.92),
]


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def describe_course(category: str, level: str, rng: Optional[random.Random] = None) -> str:
    """
    Build a course description from the category and level.
    Unknown categories use the Programming sentences.
    """
    r = _rng(rng)
    base = r.choice(DESCRIPTIONS.get(category) or DESCRIPTIONS["Programming"])
    modifier = LEVEL_MODIFIERS.get(level, "")
    closing = (
        "Through interactive lessons, real-world projects, and expert instruction, "
        f"you'll develop the skills needed to excel in {category.lower()}."
    )
    return " ".join(part for part in (base, modifier, closing) if part)


def confidence_score(rng: Optional[random.Random] = None) -> int:
    """Displayed confidence (percent) of a generated description."""
    return _rng(rng).randrange(85, 100)


def instructor_bio(
    name: str,
    department: str,
    experience: int | str,
    expertise: str = "",
    rng: Optional[random.Random] = None,
) -> str:
    dept = department.lower()
    templates = [
        (
            f"{name} is a dedicated {dept} professional with {experience} years of industry experience. "
            f"Specializing in {expertise or 'various technologies'}, they bring real-world expertise and "
            "passion for education to create engaging learning experiences."
        ),
        (
            f"With {experience} years in {dept}, {name} combines deep technical knowledge with exceptional "
            f"teaching skills. Their expertise in {expertise or 'industry practices'} helps students bridge "
            "the gap between theory and practical application."
        ),
        (
            f"{name} is an experienced educator and {dept} expert with {experience} years of professional "
            f"experience. Known for their innovative teaching methods and expertise in "
            f"{expertise or 'emerging technologies'}, they inspire students to achieve their full potential."
        ),
    ]
    return _rng(rng).choice(templates)


def recommend_courses(
    data: Dict[str, Any],
    student_id: int,
    rng: Optional[random.Random] = None,
    limit: int = 3,
) -> List[Dict[str, Any]]:
    """
    Recommend up to `limit` courses for a student.

    Candidates are Active courses with free seats that the student does not
    already hold. Returns dicts {"course", "reason", "confidence"}, best first.
    """
    if not data.get("aiSettings", {}).get("enabled", True):
        return []

    student = next((s for s in data.get("students", []) if s.get("id") == student_id), None)
    if student is None:
        return []

    r = _rng(rng)
    held = set(student.get("courses") or [])
    out: List[Dict[str, Any]] = []
    for course in data.get("courses", []):
        if course.get("id") in held or course.get("status") != ACTIVE:
            continue
        if course.get("enrolled", 0) >= course.get("capacity", 0):
            continue
        reason, confidence = r.choice(RECOMMENDATION_REASONS)
        out.append(
            {
                "course": course,
                "reason": reason,
                "confidence": confidence + r.uniform(-0.05, 0.05),
            }
        )

    out.sort(key=lambda rec: rec["confidence"], reverse=True)
    return out[:limit]

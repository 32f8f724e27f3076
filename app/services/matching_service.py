"""
Job Matching Service

PURPOSE:
Score active jobs against a student's skills for the "recommended jobs"
panel.

HOW IT WORKS:
1. Take the three most recently posted active jobs
2. Score each one: share of the job's required skills the student has
3. Sort by score, highest first (ties keep posting order)

The score is a plain overlap count: exact, case-sensitive skill names,
no weighting and no fuzzy matching.
"""

from typing import List

from app.services.job_service import get_job_service
from app.services.profile_service import get_student_profile_service

RECOMMENDATION_POOL = 3


def match_score(skills_required: List[str], user_skills: List[str]) -> int:
    """
    Percentage of required skills the user has, truncated to an int.

    {A, B, C} against {A, C} -> 66. No required skills -> 0.
    """
    required = set(skills_required or [])
    if not required:
        return 0
    overlap = len(required & set(user_skills or []))
    return int(overlap * 100 / len(required))


def rank_jobs(jobs: List[dict], user_skills: List[str]) -> List[dict]:
    """Attach `match_score` to each job and sort descending (stable)."""
    scored = [dict(job, match_score=match_score(job["skills_required"], user_skills)) for job in jobs]
    return sorted(scored, key=lambda j: j["match_score"], reverse=True)


class RecommendationService:

    def __init__(self):
        self.jobs = get_job_service()
        self.profiles = get_student_profile_service()

    def recommended_jobs(self, user_id: str) -> List[dict]:
        skills = self.profiles.get_or_create(user_id)["skills"]
        recent = self.jobs.recent_active(limit=RECOMMENDATION_POOL)
        return rank_jobs(recent, skills)


_recommendation_service = None


def get_recommendation_service() -> RecommendationService:
    global _recommendation_service
    if _recommendation_service is None:
        _recommendation_service = RecommendationService()
    return _recommendation_service

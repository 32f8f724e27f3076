"""
Onboarding State Machine

Two independent wizard tracks, picked by the user's role:

    student:  basic-info -> profile-picture -> github -> linkedin
              -> resume -> skills -> completed
    employer: company-info -> company-logo -> company-details
              -> contact-info -> completed

The current step is stored per (user, track) in `onboarding_state`.
No row means the user is on the first step. Navigation is free: any
step of the track can be set directly, without checking that earlier
steps were completed. Logout deletes the row.

progress(step) = round(100 * (index + 1) / total), rounding half up,
so student `resume` (index 4 of 7) is 71.
"""

import math
from enum import Enum
from typing import Dict, List, Optional, Union

import structlog
from sqlalchemy import text

from app.core.errors import ValidationError
from app.db.postgres import fetch_one, get_db_session, utcnow

logger = structlog.get_logger(__name__)


class StudentStep(str, Enum):
    BASIC_INFO = "basic-info"
    PROFILE_PICTURE = "profile-picture"
    GITHUB = "github"
    LINKEDIN = "linkedin"
    RESUME = "resume"
    SKILLS = "skills"
    COMPLETED = "completed"


class EmployerStep(str, Enum):
    COMPANY_INFO = "company-info"
    COMPANY_LOGO = "company-logo"
    COMPANY_DETAILS = "company-details"
    CONTACT_INFO = "contact-info"
    COMPLETED = "completed"


COMPLETED = "completed"


class Track:
    """An ordered list of step names ending in `completed`."""

    def __init__(self, name: str, steps: List[str]):
        self.name = name
        self.steps = steps

    @property
    def first(self) -> str:
        return self.steps[0]

    @property
    def total(self) -> int:
        return len(self.steps)

    def parse(self, step: Union[str, Enum]) -> str:
        value = step.value if isinstance(step, Enum) else step
        if value not in self.steps:
            raise ValidationError(f"Unknown {self.name} onboarding step: {value}")
        return value

    def index(self, step: str) -> int:
        return self.steps.index(self.parse(step))

    def progress(self, step: str) -> int:
        # floor(x + 0.5) rounds half up; round() would round half to even
        return math.floor(100 * (self.index(step) + 1) / self.total + 0.5)

    def next(self, step: str) -> str:
        i = self.index(step)
        return self.steps[min(i + 1, self.total - 1)]

    def previous(self, step: str) -> str:
        i = self.index(step)
        return self.steps[max(i - 1, 0)]


TRACKS: Dict[str, Track] = {
    "student": Track("student", [s.value for s in StudentStep]),
    "employer": Track("employer", [s.value for s in EmployerStep]),
}


def get_track(role: str) -> Track:
    if role not in TRACKS:
        raise ValidationError(f"No onboarding track for role: {role}")
    return TRACKS[role]


def progress(role: str, step: str) -> int:
    return get_track(role).progress(step)


class OnboardingService:
    """
    Wizard state of one user.

    Usage:
        wizard = OnboardingService(user["id"], user["role"])
        wizard.set_step(StudentStep.GITHUB)
        wizard.state()  # {"track": "student", "step": "github", "progress": 43, ...}
    """

    def __init__(self, user_id: str, role: str):
        self.user_id = user_id
        self.track = get_track(role)

    def current_step(self) -> str:
        with get_db_session() as db:
            row = fetch_one(
                db,
                "SELECT step FROM onboarding_state WHERE user_id = :user_id AND track = :track",
                {"user_id": self.user_id, "track": self.track.name}
            )
        if not row or row["step"] not in self.track.steps:
            return self.track.first
        return row["step"]

    def set_step(self, step: Union[str, Enum]) -> str:
        value = self.track.parse(step)
        with get_db_session() as db:
            db.execute(
                text("""
                    INSERT INTO onboarding_state (user_id, track, step, updated_at)
                    VALUES (:user_id, :track, :step, :now)
                    ON CONFLICT (user_id, track)
                    DO UPDATE SET step = EXCLUDED.step, updated_at = EXCLUDED.updated_at
                """),
                {"user_id": self.user_id, "track": self.track.name, "step": value, "now": utcnow()}
            )
        logger.info("onboarding_step_set", user_id=self.user_id, track=self.track.name, step=value)
        return value

    def advance(self) -> str:
        """Move one step forward. No-op on `completed`."""
        current = self.current_step()
        nxt = self.track.next(current)
        if nxt == current:
            return current
        return self.set_step(nxt)

    def retreat(self) -> str:
        """Move one step back. No-op on the first step."""
        current = self.current_step()
        prev = self.track.previous(current)
        if prev == current:
            return current
        return self.set_step(prev)

    def state(self, step: Optional[str] = None) -> dict:
        step = step or self.current_step()
        return {
            "track": self.track.name,
            "step": step,
            "progress": self.track.progress(step),
            "steps": list(self.track.steps),
            "completed": step == COMPLETED,
        }

    def reset(self) -> None:
        """Forget the wizard state (sign-out)."""
        with get_db_session() as db:
            db.execute(
                text("DELETE FROM onboarding_state WHERE user_id = :user_id"),
                {"user_id": self.user_id}
            )

"""Data models for listings, outcomes and run bookkeeping."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Provider(str, Enum):
    LINKEDIN = "LinkedIn"
    INDEED = "Indeed"
    DICE = "Dice"
    GLASSDOOR = "Glassdoor"
    COMPANY_WEBSITE = "CompanyWebsite"
    OTHER = "Other"


class OutcomeStatus(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureReason(str, Enum):
    NO_APPLY_BUTTON = "no-apply-button"
    NO_SUBMIT_BUTTON = "no-submit-button"
    FORM_STUCK = "form-stuck"
    MANUAL_INPUT_DECLINED = "manual-input-declined"
    INTERACTION_ERROR = "interaction-error"
    SESSION_LOST = "session-lost"


class FieldState(str, Enum):
    EMPTY = "empty"
    PLACEHOLDER = "placeholder"
    FILLED = "filled"

    @property
    def counts_as_empty(self) -> bool:
        """Placeholder values escalate exactly like empty ones."""
        return self is not FieldState.FILLED


class SessionState(str, Enum):
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class JobListing:
    title: str
    company: str
    job_id: str
    url: str
    provider: Provider
    previously_applied: bool = False
    # True when the site exposed no id and job_id is a hash or random token.
    synthetic_id: bool = False
    discovered_at: datetime = field(default_factory=_utcnow)

    @property
    def key(self) -> tuple[Provider, str]:
        return (self.provider, self.job_id)

    def __str__(self) -> str:
        return f"{self.title} @ {self.company}"


@dataclass(frozen=True)
class ApplicationOutcome:
    listing: JobListing
    status: OutcomeStatus
    failure_reason: FailureReason | None = None
    detail: str = ""
    completed_at: datetime = field(default_factory=_utcnow)

    @property
    def success(self) -> bool:
        return self.status is OutcomeStatus.APPLIED

    @classmethod
    def applied(cls, listing: JobListing, detail: str = "") -> ApplicationOutcome:
        return cls(listing, OutcomeStatus.APPLIED, detail=detail)

    @classmethod
    def skipped(cls, listing: JobListing, detail: str) -> ApplicationOutcome:
        return cls(listing, OutcomeStatus.SKIPPED, detail=detail)

    @classmethod
    def failed(
        cls, listing: JobListing, reason: FailureReason, detail: str = ""
    ) -> ApplicationOutcome:
        return cls(listing, OutcomeStatus.FAILED, failure_reason=reason, detail=detail)

    def describe(self) -> str:
        if self.status is OutcomeStatus.FAILED and self.failure_reason:
            text = self.failure_reason.value
            return f"{text}: {self.detail}" if self.detail else text
        return self.detail or self.status.value


@dataclass
class RunCursor:
    """Position in the current discovery pass or apply loop."""
    iteration: int = 0
    processed_cards: int = 0
    attempted: int = 0


@dataclass(frozen=True)
class Timeouts:
    """Bounded waits, in seconds."""
    cards: float = 10.0
    control: float = 5.0
    apply: float = 10.0
    submit: float = 10.0
    done: float = 5.0
    transition: float = 8.0
    poll_interval: float = 0.2

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> Timeouts:
        raw = settings.get("timeouts", {})
        known = {k: float(v) for k, v in raw.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class RunSummary:
    found: int = 0
    outcomes: list[ApplicationOutcome] = field(default_factory=list)
    stopped_early: str | None = None
    report_path: str | None = None

    def add(self, outcome: ApplicationOutcome) -> None:
        self.outcomes.append(outcome)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def applied(self) -> int:
        return self._count(OutcomeStatus.APPLIED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def success_rate(self) -> float:
        attempted = self.applied + self.failed
        return self.applied / attempted if attempted else 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "jobs_found": self.found,
            "applied": self.applied,
            "skipped": self.skipped,
            "failed": self.failed,
            "success_rate": round(self.success_rate, 3),
            "stopped_early": self.stopped_early,
            "report_path": self.report_path,
        }

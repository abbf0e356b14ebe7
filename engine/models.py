# models.py – request, payload and outcome types for one solve flow

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

SENTINEL_ANSWER = "unable-to-automatically-solve"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SolveRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    secret: str
    url: str
    deadline: datetime

    @classmethod
    def accept(cls, email: str, secret: str, url: str, max_flow_seconds: float) -> "SolveRequest":
        """Stamp the deadline at acceptance time; it is never recomputed."""
        return cls(
            email=email,
            secret=secret,
            url=url,
            deadline=utcnow() + timedelta(seconds=max_flow_seconds),
        )

    def seconds_left(self) -> float:
        return (self.deadline - utcnow()).total_seconds()


class AnswerPayload(BaseModel):
    email: str
    secret: str
    url: str
    answer: Any

    def preview(self, limit: int = 200) -> str:
        masked = self.model_copy(update={"secret": "***"})
        return masked.model_dump_json()[:limit]


class SubmitResult(BaseModel):
    http_status: int
    response_body: Any = None
    next_url: Optional[str] = None
    followed: bool = False


class FlowState(str, Enum):
    INIT = "init"
    NAVIGATED = "navigated"
    EXTRACTED = "extracted"
    DECODED = "decoded"
    ANSWER_RESOLVED = "answer_resolved"
    SUBMIT_ATTEMPTED = "submit_attempted"
    FOLLOWED_ONCE = "followed_once"
    CLOSED = "closed"


@dataclass
class SolveOutcome:
    url: str
    states: List[FlowState] = field(default_factory=lambda: [FlowState.INIT])
    extracted_length: int = 0
    decoded: Optional[Dict[str, Any]] = None
    answer: Optional[AnswerPayload] = None
    answer_rule: Optional[str] = None
    destination: Optional[str] = None
    submit_result: Optional[SubmitResult] = None
    error: Optional[str] = None

    def advance(self, state: FlowState) -> None:
        self.states.append(state)

    @property
    def final_state(self) -> FlowState:
        return self.states[-1]

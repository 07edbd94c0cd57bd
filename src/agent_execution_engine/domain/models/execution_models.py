"""Models describing one agent execution and its progress."""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict

from .content import UsageDetails

TOOL_NOT_EXECUTED = "(Tool invocation not implemented)"


class LoopState(str, Enum):
    """States of a single conversation loop execution."""

    SEEDING = "seeding"
    AWAITING_RESPONSE = "awaiting_response"
    EVALUATING = "evaluating"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class ExecutionStep:
    """One unit of the execution trace: a thought, an action or an observation."""

    iteration: int
    thought: str | None = None
    action: str | None = None
    action_input: str | None = None
    observation: str | None = None

    @property
    def kind(self) -> str:
        if self.action is not None:
            return "action"
        if self.observation is not None:
            return "observation"
        return "thought"


@dataclass(frozen=True)
class ProgressEvent:
    """Transient progress notification delivered to a progress sink."""

    stage: str
    message: str
    progress_percentage: int
    task_id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        if not 0 <= self.progress_percentage <= 100:
            raise ValueError(f"progress_percentage must be within 0..100, got {self.progress_percentage}")


class ExecutionResult(BaseModel):
    """Terminal value of one execution."""

    model_config = ConfigDict(frozen=True)

    success: bool
    final_answer: str = ""
    steps: tuple[ExecutionStep, ...] = ()
    error_message: str | None = None
    cancelled: bool = False
    iterations: int = 0
    thread_id: str | None = None
    usage: UsageDetails | None = None

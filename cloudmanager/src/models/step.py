"""
Execution and step state models.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum

from cloudmanager.src.models.resources import HalResource

class StepStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    RUNNING = "RUNNING"
    WAITING = "WAITING"
    FINISHED = "FINISHED"
    FAILED = "FAILED"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED"
    SKIPPED = "SKIPPED"

TERMINAL_STATUSES = {
    StepStatus.FINISHED,
    StepStatus.FAILED,
    StepStatus.ERROR,
    StepStatus.CANCELLED,
    StepStatus.SKIPPED,
}

class ActionKind(str, Enum):
    APPROVAL = "approval"
    MANAGED = "managed"
    SCHEDULE = "schedule"
    DEPLOY = "deploy"
    GATE = "gate"

class StepAction(BaseModel):
    """
    Step action decoded once from the raw `action` string.
    Anything that is not approval/managed/schedule/deploy is a GATE
    carrying the literal action name (securityTest, loadTest, build, ...).
    """
    kind: ActionKind
    name: str
    environment_type: Optional[str] = None

    class Config:
        frozen = True

    @classmethod
    def decode(cls, action: Optional[str], environment_type: Optional[str] = None) -> "StepAction":
        action = action or ""
        if action == ActionKind.DEPLOY.value:
            return cls(kind=ActionKind.DEPLOY, name=action, environment_type=environment_type)
        if action in (ActionKind.APPROVAL.value, ActionKind.MANAGED.value, ActionKind.SCHEDULE.value):
            return cls(kind=ActionKind(action), name=action)
        return cls(kind=ActionKind.GATE, name=action)

class StepState(HalResource):
    id: Optional[str] = None
    action: Optional[str] = None
    environment_type: Optional[str] = Field(default=None, alias="environmentType")
    status: Optional[str] = None

    @property
    def step_action(self) -> StepAction:
        return StepAction.decode(self.action, self.environment_type)

    @property
    def waiting(self) -> bool:
        return self.status == StepStatus.WAITING.value

    @property
    def terminal(self) -> bool:
        return self.status in {s.value for s in TERMINAL_STATUSES}

class Execution(HalResource):
    id: Optional[str] = None
    status: Optional[str] = None

    @property
    def step_states(self) -> List[StepState]:
        documents = self.document.embedded_array("stepStates") or []
        return [StepState.from_document(doc) for doc in documents]

from cloudmanager.src.models.resources import (
    HalResource,
    Program,
    Phase,
    Pipeline,
    Environment,
    LogDownload,
    DownloadResult,
)
from cloudmanager.src.models.step import (
    StepStatus,
    ActionKind,
    StepAction,
    StepState,
    Execution,
)

__all__ = [
    "HalResource",
    "Program",
    "Phase",
    "Pipeline",
    "Environment",
    "LogDownload",
    "DownloadResult",
    "StepStatus",
    "ActionKind",
    "StepAction",
    "StepState",
    "Execution",
]

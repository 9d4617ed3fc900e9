from cloudmanager.src.services.client import CloudManagerClient
from cloudmanager.src.services.errors import (
    CloudManagerError,
    NotFound,
    GateNotFound,
    NotCancellable,
    NotAdvanceable,
    UnsupportedTransition,
    RequestFailed,
    TransitionFailed,
    ExecutionAlreadyRunning,
    NoTailableLog,
    LogNotFound,
    TailRequestFailed,
    DownloadResolutionFailed,
    DecompressionFailed,
)
from cloudmanager.src.services.log_tail import LogTailEngine, TailState, is_near_utc_midnight
from cloudmanager.src.services.log_download import LogDownloadEngine
from cloudmanager.src.services.resolver import ResourceResolver
from cloudmanager.src.services.step_locator import (
    find_by_gate,
    find_current_step,
    find_waiting_step,
)
from cloudmanager.src.services.transitions import (
    TransitionDispatcher,
    advance_body,
    cancel_body,
)
from cloudmanager.src.services.transport import ApiClient

__all__ = [
    "CloudManagerClient",
    "CloudManagerError",
    "NotFound",
    "GateNotFound",
    "NotCancellable",
    "NotAdvanceable",
    "UnsupportedTransition",
    "RequestFailed",
    "TransitionFailed",
    "ExecutionAlreadyRunning",
    "NoTailableLog",
    "LogNotFound",
    "TailRequestFailed",
    "DownloadResolutionFailed",
    "DecompressionFailed",
    "LogTailEngine",
    "TailState",
    "is_near_utc_midnight",
    "LogDownloadEngine",
    "ResourceResolver",
    "find_by_gate",
    "find_current_step",
    "find_waiting_step",
    "TransitionDispatcher",
    "advance_body",
    "cancel_body",
    "ApiClient",
]

"""
Relation names and paths of the Cloud Manager API.
"""

from enum import Enum

BASE_PATH = "/api/programs"

_NS = "http://ns.adobe.com/adobecloud/rel"

class Rel(str, Enum):
    SELF = "self"
    PIPELINES = f"{_NS}/pipelines"
    ENVIRONMENTS = f"{_NS}/environments"
    EXECUTION = f"{_NS}/execution"
    EXECUTION_ID = f"{_NS}/execution/id"
    METRICS = f"{_NS}/pipeline/metrics"
    CANCEL = f"{_NS}/pipeline/cancel"
    ADVANCE = f"{_NS}/pipeline/advance"
    STEP_LOGS = f"{_NS}/pipeline/logs"
    LOGS = f"{_NS}/logs"
    LOGS_DOWNLOAD = f"{_NS}/logs/download"
    LOGS_TAIL = f"{_NS}/logs/tail"
    DEVELOPER_CONSOLE = f"{_NS}/developerConsole"

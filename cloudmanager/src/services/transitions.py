"""
Advance or cancel a step state.
"""

import logging
from typing import Any, Dict, List, Optional

from cloudmanager.src.constants import Rel
from cloudmanager.src.models import ActionKind, StepState
from cloudmanager.src.services.errors import (
    NotAdvanceable,
    NotCancellable,
    NotFound,
    TransitionFailed,
    UnsupportedTransition,
)
from cloudmanager.src.services.transport import ApiClient, raise_for_status

logger = logging.getLogger(__name__)

def failed_important(metric: Dict[str, Any]) -> bool:
    return metric.get("severity") == "important" and metric.get("passed") is False

def overridden(metric: Dict[str, Any]) -> Dict[str, Any]:
    """The metric as received, with the override flag set."""
    return {**metric, "override": True}

def cancel_body(step: StepState) -> Dict[str, Any]:
    """Request body cancelling `step`; depends only on its action and status."""
    kind = step.step_action.kind

    if kind is ActionKind.APPROVAL:
        return {"approved": False}
    if kind is ActionKind.MANAGED:
        return {"start": False}
    if step.waiting and kind is not ActionKind.SCHEDULE:
        return {"override": False}
    if kind is ActionKind.DEPLOY:
        return {"resume": False}
    return {"cancel": True}

def advance_body(step: StepState, metrics: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """
    Request body advancing `step`.
    Gate steps override every failed important metric and leave the rest untouched.
    """
    kind = step.step_action.kind

    if kind is ActionKind.APPROVAL:
        return {"approved": True}
    if kind is ActionKind.MANAGED:
        return {"start": True}
    if kind is ActionKind.SCHEDULE:
        raise UnsupportedTransition("Cannot advance schedule step")
    if kind is ActionKind.DEPLOY:
        return {"resume": True}
    if kind is ActionKind.GATE:
        return {
            "metrics": [overridden(metric) for metric in metrics or [] if failed_important(metric)]
        }
    raise UnsupportedTransition(f"Unknown step action {step.action}")

async def get_metrics(client: ApiClient, step: StepState) -> List[Dict[str, Any]]:
    link = step.link(Rel.METRICS)
    if link is None:
        raise NotFound(f"Cannot find a metrics link for step ({step.action})")
    result = await client.get_json(link.href, "Cannot get metrics")
    return result.get("metrics") or []

class TransitionDispatcher:
    def __init__(self, client: ApiClient):
        self.client = client

    async def cancel(self, step: StepState) -> Dict[str, Any]:
        link = step.link(Rel.CANCEL)
        if link is None:
            raise NotCancellable(
                f"Cannot find a cancel link for the current step ({step.action}). "
                "Step may not be cancellable."
            )

        body = cancel_body(step)
        logger.info(f"Cancelling step {step.action} with {body}")
        res = await self.client.put(link.href, body)
        raise_for_status(res, "Cannot cancel execution", TransitionFailed)
        return {}

    async def advance(self, step: StepState) -> Dict[str, Any]:
        link = step.link(Rel.ADVANCE)
        if link is None:
            raise NotAdvanceable(f"Cannot find an advance link for the current step ({step.action})")

        metrics = None
        if step.step_action.kind is ActionKind.GATE:
            metrics = await get_metrics(self.client, step)

        body = advance_body(step, metrics)
        logger.info(f"Advancing step {step.action} with {body}")
        res = await self.client.put(link.href, body)
        raise_for_status(res, "Cannot advance execution", TransitionFailed)
        return {}

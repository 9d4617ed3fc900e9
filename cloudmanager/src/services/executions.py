"""
Pipeline executions: start, fetch, gate metrics and step logs.
"""

import logging
from typing import Any, BinaryIO, Dict

from cloudmanager.src import hal
from cloudmanager.src.constants import Rel
from cloudmanager.src.models import Execution, StepState
from cloudmanager.src.services.errors import (
    DownloadResolutionFailed,
    ExecutionAlreadyRunning,
    GateNotFound,
    NotFound,
)
from cloudmanager.src.services.resolver import ResourceResolver, require_link
from cloudmanager.src.services.step_locator import find_by_gate
from cloudmanager.src.services.transport import ApiClient, json_or_none, raise_for_status

logger = logging.getLogger(__name__)

class ExecutionService:
    def __init__(self, client: ApiClient, resolver: ResourceResolver):
        self.client = client
        self.resolver = resolver

    async def start_execution(self, program_id: str, pipeline_id: str) -> str:
        """Start the pipeline and return the location of the new execution."""
        pipeline = await self.resolver.get_pipeline(program_id, pipeline_id)
        link = require_link(pipeline, Rel.EXECUTION)

        res = await self.client.put(link.href)
        if res.status_code == 412:
            raise ExecutionAlreadyRunning(
                "Cannot create execution. Pipeline already running",
                str(res.url), res.status_code, res.reason_phrase,
            )
        raise_for_status(res, "Cannot start execution")

        location = res.headers.get("location")
        logger.info(f"Started execution of pipeline {pipeline_id}: {location}")
        return location

    async def get_current_execution(self, program_id: str, pipeline_id: str) -> Execution:
        pipeline = await self.resolver.get_pipeline(program_id, pipeline_id)
        link = require_link(pipeline, Rel.EXECUTION)

        result = await self.client.get_json(link.href, "Cannot get current execution")
        return Execution.from_document(hal.parse(result))

    async def get_execution(self, program_id: str, pipeline_id: str, execution_id: str) -> Execution:
        pipeline = await self.resolver.get_pipeline(program_id, pipeline_id)
        link = require_link(pipeline, Rel.EXECUTION_ID)

        result = await self.client.get_json(link.expand(executionId=execution_id), "Cannot get execution")
        return Execution.from_document(hal.parse(result))

    async def find_gate_step(
        self,
        program_id: str,
        pipeline_id: str,
        execution_id: str,
        gate: str,
    ) -> StepState:
        execution = await self.get_execution(program_id, pipeline_id, execution_id)
        step = find_by_gate(execution, gate)
        if step is None:
            raise GateNotFound(f"Cannot find step state for action {gate} on execution {execution_id}.")
        return step

    async def get_quality_gate_results(
        self,
        program_id: str,
        pipeline_id: str,
        execution_id: str,
        gate: str,
    ) -> Dict[str, Any]:
        step = await self.find_gate_step(program_id, pipeline_id, execution_id, gate)
        link = step.link(Rel.METRICS)
        if link is None:
            raise NotFound(f"Step {step.action} on execution {execution_id} has no metrics")
        return await self.client.get_json(link.href, "Cannot get metrics")

    async def get_execution_step_log(
        self,
        program_id: str,
        pipeline_id: str,
        execution_id: str,
        gate: str,
        sink: BinaryIO,
    ):
        """Stream the log of a step into `sink`."""
        step = await self.find_gate_step(program_id, pipeline_id, execution_id, gate)
        link = step.link(Rel.STEP_LOGS)
        if link is None:
            raise NotFound(f"Step {step.action} on execution {execution_id} has no log")

        res = await self.client.get(link.href)
        raise_for_status(res, "Cannot get log")
        payload = json_or_none(res)
        redirect = payload.get("redirect") if isinstance(payload, dict) else None
        if not redirect:
            raise DownloadResolutionFailed(f"Log {res.url} did not contain a redirect. Was {payload}.")

        async with self.client.stream_storage(redirect) as log_res:
            raise_for_status(log_res, "Cannot download log")
            async for chunk in log_res.aiter_bytes():
                sink.write(chunk)

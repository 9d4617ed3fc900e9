"""
Cloud Manager client: one entry point over navigation, transitions and logs.
"""

import asyncio
import logging
from typing import Any, BinaryIO, Dict, List, Optional

import httpx

from cloudmanager.src.config import Settings, get_settings
from cloudmanager.src.models import DownloadResult, Environment, Execution, Pipeline, Program
from cloudmanager.src.services.environments import available_log_options, developer_console_url
from cloudmanager.src.services.errors import NotFound
from cloudmanager.src.services.executions import ExecutionService
from cloudmanager.src.services.log_download import LogDownloadEngine
from cloudmanager.src.services.log_tail import LogTailEngine
from cloudmanager.src.services.pipelines import PipelineService
from cloudmanager.src.services.resolver import ResourceResolver
from cloudmanager.src.services.step_locator import find_current_step, find_waiting_step
from cloudmanager.src.services.transitions import TransitionDispatcher
from cloudmanager.src.services.transport import ApiClient

logger = logging.getLogger(__name__)

class CloudManagerClient:
    """
    Usage:
        async with CloudManagerClient() as client:
            pipelines = await client.list_pipelines("1234", busy=True)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.api = ApiClient(self.settings, transport=transport)
        self.resolver = ResourceResolver(self.api)
        self.executions = ExecutionService(self.api, self.resolver)
        self.pipelines = PipelineService(self.api, self.resolver)
        self.transitions = TransitionDispatcher(self.api)
        self.downloads = LogDownloadEngine(self.api)

    async def aclose(self):
        await self.api.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    # Navigation

    async def list_programs(self) -> List[Program]:
        return await self.resolver.list_programs()

    async def list_pipelines(self, program_id: str, busy: bool = False) -> List[Pipeline]:
        return await self.resolver.list_pipelines(program_id, busy=busy)

    async def list_environments(self, program_id: str) -> List[Environment]:
        return await self.resolver.list_environments(program_id)

    # Pipelines and executions

    async def start_execution(self, program_id: str, pipeline_id: str) -> str:
        return await self.executions.start_execution(program_id, pipeline_id)

    async def get_current_execution(self, program_id: str, pipeline_id: str) -> Execution:
        return await self.executions.get_current_execution(program_id, pipeline_id)

    async def get_execution(self, program_id: str, pipeline_id: str, execution_id: str) -> Execution:
        return await self.executions.get_execution(program_id, pipeline_id, execution_id)

    async def get_quality_gate_results(
        self, program_id: str, pipeline_id: str, execution_id: str, gate: str
    ) -> Dict[str, Any]:
        return await self.executions.get_quality_gate_results(program_id, pipeline_id, execution_id, gate)

    async def get_execution_step_log(
        self, program_id: str, pipeline_id: str, execution_id: str, gate: str, sink: BinaryIO
    ):
        await self.executions.get_execution_step_log(program_id, pipeline_id, execution_id, gate, sink)

    async def cancel_current_execution(self, program_id: str, pipeline_id: str) -> Dict[str, Any]:
        execution = await self.executions.get_current_execution(program_id, pipeline_id)
        step = find_current_step(execution)
        if step is None:
            raise NotFound(f"Cannot find a current step for pipeline {pipeline_id}")
        return await self.transitions.cancel(step)

    async def advance_current_execution(self, program_id: str, pipeline_id: str) -> Dict[str, Any]:
        execution = await self.executions.get_current_execution(program_id, pipeline_id)
        step = find_waiting_step(execution)
        if step is None:
            raise NotFound(f"Cannot find a waiting step for pipeline {pipeline_id}")
        return await self.transitions.advance(step)

    async def delete_pipeline(self, program_id: str, pipeline_id: str) -> Dict[str, Any]:
        return await self.pipelines.delete_pipeline(program_id, pipeline_id)

    async def update_pipeline(
        self,
        program_id: str,
        pipeline_id: str,
        branch: Optional[str] = None,
        repository_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.pipelines.update_pipeline(
            program_id, pipeline_id, branch=branch, repository_id=repository_id
        )

    # Environments and logs

    async def list_available_log_options(self, program_id: str, environment_id: str) -> List[Dict[str, Any]]:
        environment = await self.resolver.get_environment(program_id, environment_id)
        return available_log_options(environment)

    async def get_developer_console_url(self, program_id: str, environment_id: str) -> str:
        environment = await self.resolver.get_environment(program_id, environment_id)
        return developer_console_url(environment)

    async def download_logs(
        self,
        program_id: str,
        environment_id: str,
        service: str,
        name: str,
        days: int,
        output_dir: str,
    ) -> List[DownloadResult]:
        environment = await self.resolver.get_environment(program_id, environment_id)
        return await self.downloads.download_all(environment, service, name, days, output_dir)

    async def tail_log(
        self,
        program_id: str,
        environment_id: str,
        service: str,
        name: str,
        sink: BinaryIO,
        stop: Optional[asyncio.Event] = None,
    ):
        """Tail a log into `sink` until `stop` is set, the task is cancelled or a fatal status occurs."""
        environment = await self.resolver.get_environment(program_id, environment_id)
        engine = LogTailEngine(self.api, environment, service, name, settings=self.settings)
        await engine.run(sink, stop=stop)

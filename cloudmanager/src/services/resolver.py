"""
Navigate from a program id to its pipelines and environments.
"""

import logging
from typing import List

from cloudmanager.src import hal
from cloudmanager.src.constants import BASE_PATH, Rel
from cloudmanager.src.models import Program, Pipeline, Environment
from cloudmanager.src.services.errors import NotFound
from cloudmanager.src.services.transport import ApiClient

logger = logging.getLogger(__name__)

def require_link(pipeline: Pipeline, rel: Rel):
    link = pipeline.link(rel)
    if link is None:
        raise NotFound(f"Pipeline {pipeline.id} has no {rel.name.lower()} link")
    return link

class ResourceResolver:
    """
    Walks programs -> program -> pipelines/environments.
    Every call re-fetches the whole chain; nothing is cached.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    async def list_programs(self) -> List[Program]:
        result = await self.client.get_json(BASE_PATH, "Cannot retrieve programs")
        programs = hal.parse(result).embedded_array("programs") or []
        return [Program.from_document(doc) for doc in programs]

    async def resolve_program(self, program_id: str) -> Program:
        """Find the program in the listing and re-fetch its own resource."""
        programs = await self.list_programs()
        listed = next((p for p in programs if p.id == program_id), None)
        if listed is None:
            raise NotFound(f"Could not find program {program_id}")

        self_link = listed.link(Rel.SELF)
        if self_link is None:
            raise NotFound(f"Program {program_id} has no self link")
        result = await self.client.get_json(self_link.href, "Cannot retrieve program")
        return Program.from_document(hal.parse(result))

    async def _list_collection(self, program_id: str, rel: Rel, name: str) -> List[hal.HalDocument]:
        program = await self.resolve_program(program_id)
        link = program.link(rel)
        if link is None:
            raise NotFound(f"Could not find {name} for program {program_id}")

        result = await self.client.get_json(link.href, f"Cannot retrieve {name}")
        documents = hal.parse(result).embedded_array(name)
        if documents is None:
            raise NotFound(f"Could not find {name} for program {program_id}")
        return documents

    async def list_pipelines(self, program_id: str, busy: bool = False) -> List[Pipeline]:
        documents = await self._list_collection(program_id, Rel.PIPELINES, "pipelines")
        pipelines = [Pipeline.from_document(doc) for doc in documents]
        if busy:
            pipelines = [p for p in pipelines if p.busy]
        return pipelines

    async def get_pipeline(self, program_id: str, pipeline_id: str) -> Pipeline:
        pipelines = await self.list_pipelines(program_id)
        pipeline = next((p for p in pipelines if p.id == pipeline_id), None)
        if pipeline is None:
            raise NotFound(f"Pipeline {pipeline_id} does not exist")
        return pipeline

    async def list_environments(self, program_id: str) -> List[Environment]:
        documents = await self._list_collection(program_id, Rel.ENVIRONMENTS, "environments")
        return [Environment.from_document(doc) for doc in documents]

    async def get_environment(self, program_id: str, environment_id: str) -> Environment:
        environments = await self.list_environments(program_id)
        environment = next((e for e in environments if e.id == environment_id), None)
        if environment is None:
            raise NotFound(f"Could not find environment {environment_id} for program {program_id}")
        return environment

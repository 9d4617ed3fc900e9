"""
Pipeline edits: delete and build phase changes.
"""

import logging
from typing import Any, Dict, Optional

from cloudmanager.src.constants import Rel
from cloudmanager.src.models import Pipeline
from cloudmanager.src.services.errors import NotFound
from cloudmanager.src.services.resolver import ResourceResolver, require_link
from cloudmanager.src.services.transport import ApiClient, raise_for_status

logger = logging.getLogger(__name__)

def build_phase_patch(
    pipeline: Pipeline,
    branch: Optional[str] = None,
    repository_id: Optional[str] = None,
) -> Dict[str, Any]:
    """PATCH body changing the build phase; the snapshot itself is left as is."""
    patch = {"phases": []}

    if branch or repository_id:
        build_phase = next((phase for phase in pipeline.phases if phase.type == "BUILD"), None)
        if build_phase is None:
            raise NotFound(f"Pipeline {pipeline.id} does not appear to have a build phase")

        changes = {}
        if branch:
            changes["branch"] = branch
        if repository_id:
            changes["repository_id"] = repository_id
        new_phase = build_phase.model_copy(update=changes)
        patch["phases"].append(new_phase.model_dump(by_alias=True, exclude_unset=True))

    return patch

class PipelineService:
    def __init__(self, client: ApiClient, resolver: ResourceResolver):
        self.client = client
        self.resolver = resolver

    async def delete_pipeline(self, program_id: str, pipeline_id: str) -> Dict[str, Any]:
        pipeline = await self.resolver.get_pipeline(program_id, pipeline_id)

        res = await self.client.delete(require_link(pipeline, Rel.SELF).href)
        raise_for_status(res, "Cannot delete pipeline")
        logger.info(f"Deleted pipeline {pipeline_id}")
        return {}

    async def update_pipeline(
        self,
        program_id: str,
        pipeline_id: str,
        branch: Optional[str] = None,
        repository_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        pipeline = await self.resolver.get_pipeline(program_id, pipeline_id)
        patch = build_phase_patch(pipeline, branch=branch, repository_id=repository_id)

        res = await self.client.patch(require_link(pipeline, Rel.SELF).href, patch)
        raise_for_status(res, "Cannot update pipeline")
        logger.info(f"Updated pipeline {pipeline_id}")
        return res.json()

"""
Environment lookups: log listings, log options, developer console.
"""

import logging
from typing import Any, Dict, List

from cloudmanager.src import hal
from cloudmanager.src.constants import Rel
from cloudmanager.src.models import Environment, LogDownload
from cloudmanager.src.services.errors import NotFound
from cloudmanager.src.services.transport import ApiClient

logger = logging.getLogger(__name__)

DEVELOPER_CONSOLE_URL = "https://dev-console-{namespace}.{cluster}.dev.adobeaemcloud.com/dc/"

async def list_log_downloads(
    client: ApiClient,
    environment: Environment,
    service: str,
    name: str,
    days: int,
) -> List[LogDownload]:
    """Download descriptors for `service`/`name` over the last `days` days."""
    link = environment.link(Rel.LOGS)
    if link is None:
        raise NotFound(
            f"Could not find logs link for environment {environment.id} "
            f"for program {environment.program_id}"
        )

    url = link.expand(service=service, name=name, days=days)
    result = await client.get_json(url, "Cannot get logs")
    downloads = hal.parse(result).embedded_array("downloads") or []
    return [LogDownload.from_document(doc) for doc in downloads]

def available_log_options(environment: Environment) -> List[Dict[str, Any]]:
    return environment.available_log_options or []

def developer_console_url(environment: Environment) -> str:
    link = environment.link(Rel.DEVELOPER_CONSOLE)
    if link is not None:
        return link.href

    if environment.namespace and environment.cluster:
        return DEVELOPER_CONSOLE_URL.format(
            namespace=environment.namespace,
            cluster=environment.cluster,
        )

    raise NotFound(f"Environment {environment.id} does not appear to support Developer Console.")

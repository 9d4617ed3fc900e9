"""
Download and decompress environment log files.
"""

import asyncio
import logging
import os
import zlib
from typing import List

import httpx

from cloudmanager.src.constants import Rel
from cloudmanager.src.models import DownloadResult, Environment, LogDownload
from cloudmanager.src.services.environments import list_log_downloads
from cloudmanager.src.services.errors import DecompressionFailed, DownloadResolutionFailed
from cloudmanager.src.services.transport import ApiClient, json_or_none

logger = logging.getLogger(__name__)

GZIP_WBITS = 16 + zlib.MAX_WBITS

def build_log_path(
    output_dir: str,
    environment_id: str,
    download: LogDownload,
    index: int,
    indexed: bool,
) -> str:
    """Local file name for one part of a log download."""
    file_name = f"{environment_id}-{download.service}-{download.name}-{download.date}"
    if indexed:
        file_name += f"-{index}"
    return os.path.join(output_dir, f"{file_name}.log")

def gunzip_chunk(decompressor, data: bytes):
    """
    Feed `data` to `decompressor`, starting a fresh one for every
    gzip member that follows a finished one. Returns the decompressor
    to use next and the decompressed bytes.
    """
    output = b""
    while data:
        if decompressor.eof:
            decompressor = zlib.decompressobj(GZIP_WBITS)
        output += decompressor.decompress(data)
        data = decompressor.unused_data if decompressor.eof else b""
    return decompressor, output

async def stream_and_unzip(res: httpx.Response, output_path: str):
    """
    Gunzip a streamed response into `output_path`, member after member.
    A stream that ends early keeps whatever was decompressed.
    """
    decompressor = zlib.decompressobj(GZIP_WBITS)
    try:
        with open(output_path, "wb") as f:
            async for chunk in res.aiter_raw():
                decompressor, output = gunzip_chunk(decompressor, chunk)
                f.write(output)
            f.write(decompressor.flush())
    except zlib.error as e:
        raise DecompressionFailed(f"Could not unzip {res.url} to {output_path}") from e

    if not decompressor.eof:
        logger.warning(f"Stream from {res.url} ended before gzip trailer, kept partial {output_path}")

class LogDownloadEngine:
    def __init__(self, client: ApiClient):
        self.client = client

    async def _download(
        self,
        href: str,
        output_path: str,
        download: LogDownload,
        index: int,
    ) -> DownloadResult:
        res = await self.client.get(href)
        if not res.is_success:
            raise DownloadResolutionFailed(
                f"Could not obtain download link from {res.url} ({res.status_code} {res.reason_phrase})"
            )
        download_url = str(res.url)

        payload = json_or_none(res)
        redirect = payload.get("redirect") if isinstance(payload, dict) else None
        if not redirect:
            raise DownloadResolutionFailed(
                f"Could not retrieve redirect from {res.url} ({res.status_code} {res.reason_phrase})"
            )

        async with self.client.stream_storage(redirect) as log_res:
            if not log_res.is_success:
                raise DownloadResolutionFailed(
                    f"Could not download {log_res.url} to {output_path} "
                    f"({log_res.status_code} {log_res.reason_phrase})"
                )
            await stream_and_unzip(log_res, output_path)

        logger.info(f"Downloaded {download_url} to {output_path}")
        return DownloadResult.model_validate({
            **download.model_dump(),
            "index": index,
            "path": output_path,
            "url": download_url,
        })

    async def download_all(
        self,
        environment: Environment,
        service: str,
        name: str,
        days: int,
        output_dir: str,
    ) -> List[DownloadResult]:
        """
        Download every log part listed for the last `days` days.
        Parts run concurrently; the first failure cancels the rest.
        """
        downloads = await list_log_downloads(self.client, environment, service, name, days)

        os.makedirs(output_dir, exist_ok=True)

        tasks = []
        for download in downloads:
            links = download.link_array(Rel.LOGS_DOWNLOAD)
            indexed = len(links) > 1
            for i, link in enumerate(links):
                path = build_log_path(output_dir, environment.id, download, i, indexed)
                tasks.append(asyncio.ensure_future(self._download(link.href, path, download, i)))

        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

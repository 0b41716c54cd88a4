"""
Payload Transfer

Downloads layer zip files from the pre-signed content location returned
by the Lambda API.
"""

import asyncio
import io
import logging
from typing import Optional

import aiohttp
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..common.errors import TransferError

logger = logging.getLogger(__name__)


class PayloadDownloader:
    """
    Streams layer payloads into memory.

    Uses the injected session when given, owns one while used as an async
    context manager, and opens a short-lived session per call otherwise.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: float = 300,
        chunk_size: int = 64 * 1024,
        retry_attempts: int = 1,
        retry_min_wait: float = 1,
        retry_max_wait: float = 10
    ):
        self._session = session
        self._owns_session = False
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.chunk_size = chunk_size
        self.retry_attempts = retry_attempts
        self.retry_min_wait = retry_min_wait
        self.retry_max_wait = retry_max_wait

    async def __aenter__(self) -> "PayloadDownloader":
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def download(self, location: str) -> bytes:
        """
        Download the payload stored at a content location.

        Args:
            location: Pre-signed URL of the layer zip file

        Returns:
            The payload bytes

        Raises:
            TransferError: If the location is missing or the download fails
        """
        if not location:
            raise TransferError("layer version has no content location")

        if self._session is not None:
            return await self._download_with_retry(self._session, location)

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            return await self._download_with_retry(session, location)

    async def _download_with_retry(self, session: aiohttp.ClientSession, location: str) -> bytes:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=1, min=self.retry_min_wait, max=self.retry_max_wait),
            retry=retry_if_exception_type((aiohttp.ClientConnectionError, asyncio.TimeoutError)),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._fetch(session, location)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransferError(f"failed to retrieve the layer content: {e}") from e

    async def _fetch(self, session: aiohttp.ClientSession, location: str) -> bytes:
        buffer = io.BytesIO()
        async with session.get(location, timeout=self.timeout) as response:
            response.raise_for_status()
            try:
                async for chunk in response.content.iter_chunked(self.chunk_size):
                    buffer.write(chunk)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise TransferError(f"failed to download the layer version: {e}") from e

        payload = buffer.getvalue()
        logger.debug(f"Downloaded {len(payload)} bytes")
        return payload

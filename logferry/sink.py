"""Remote log sink: single and batch sends over HTTP."""

import logging
from typing import Protocol

import httpx

from logferry.errors import RemoteSendError
from logferry.models import BufferedLog, LogEntry, SendResult

logger = logging.getLogger(__name__)


class LogSink(Protocol):
    async def send_one(self, entry: LogEntry) -> SendResult: ...

    async def send_batch(self, buffer: BufferedLog) -> SendResult: ...


class HttpLogSink:
    """Posts log events to an ingestion endpoint.

    ``POST {base_url}/logs`` takes one event, ``POST {base_url}/logs/bulk``
    takes a whole buffer. Any 2xx response counts as delivered; the batch
    call is all-or-nothing.
    """

    def __init__(self, base_url: str, timeout: float = 10.0,
                 client: httpx.AsyncClient | None = None):
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send_one(self, entry: LogEntry) -> SendResult:
        return await self._post("/logs", entry.to_payload)

    async def send_batch(self, buffer: BufferedLog) -> SendResult:
        return await self._post("/logs/bulk", buffer.to_payload)

    async def close(self):
        await self._client.aclose()

    async def _post(self, path: str, build_payload) -> SendResult:
        url = f"{self._base_url}{path}"
        try:
            payload = build_payload()
        except (TypeError, ValueError) as exc:
            logger.warning("Could not encode payload for %s: %s", url, exc)
            return SendResult(ok=False, error=f"unencodable payload: {exc}")
        try:
            response = await self._client.post(url, json=payload)
            if not response.is_success:
                raise RemoteSendError(
                    f"{url} answered {response.status_code}",
                    status_code=response.status_code,
                )
        except RemoteSendError as exc:
            logger.warning("Send to %s rejected: %s", url, exc)
            return SendResult(ok=False, status_code=exc.status_code, error=str(exc))
        except httpx.HTTPError as exc:
            logger.warning("Send to %s failed: %s", url, exc)
            return SendResult(ok=False, error=str(exc) or type(exc).__name__)
        except ValueError as exc:
            # httpx refuses NaN and infinity in JSON bodies.
            logger.warning("Could not encode payload for %s: %s", url, exc)
            return SendResult(ok=False, error=f"unencodable payload: {exc}")
        return SendResult(ok=True, status_code=response.status_code)

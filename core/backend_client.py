from typing import Any, Dict, Mapping, Optional
import httpx
import logging
from config.settings import settings
from util.errors import BackendHttpError, BackendPayloadError, BackendTransportError

logger = logging.getLogger(__name__)


class BackendClient:
    """
    Thin async JSON reader for the job-execution backend.
    Raises BackendTransportError / BackendHttpError / BackendPayloadError; callers
    decide how each endpoint degrades.
    """

    def __init__(
        self,
        base_url: str = settings.BACKEND_BASE_URL,
        *,
        timeout: Optional[httpx.Timeout] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout
            or httpx.Timeout(
                settings.HTTP_TIMEOUT_SECONDS,
                connect=settings.HTTP_CONNECT_TIMEOUT_SECONDS,
            ),
            transport=transport,
            headers={"accept": "application/json"},
        )

    async def get_json(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        query: Dict[str, Any] = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            res = await self._client.get(path, params=query)
        except httpx.RequestError as e:
            logger.warning("backend.request_error path=%s err=%s", path, type(e).__name__)
            raise BackendTransportError(path, type(e).__name__) from e

        if res.status_code // 100 != 2:
            logger.warning("backend.bad_status path=%s status=%d", path, res.status_code)
            raise BackendHttpError(path, res.status_code)

        try:
            return res.json()
        except ValueError as e:
            logger.warning("backend.bad_json path=%s bytes=%d", path, len(res.content))
            raise BackendPayloadError(path, "invalid JSON") from e

    async def get_rows(self, path: str, params: Optional[Mapping[str, Any]] = None) -> list:
        """Like get_json, but the payload must be a JSON array."""
        data = await self.get_json(path, params)
        if not isinstance(data, list):
            raise BackendPayloadError(path, f"expected array, got {type(data).__name__}", data)
        return data

    async def aclose(self) -> None:
        await self._client.aclose()

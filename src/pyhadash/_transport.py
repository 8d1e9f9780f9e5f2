"""HTTP transport for the Home Assistant REST API."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from pyhadash._constants import USER_AGENT
from pyhadash._redact import redact_for_log
from pyhadash.config import HaConfig
from pyhadash.exceptions import HaApiError, HaTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`RestTransport`) concrete.
    """

    async def request_json(self, method: str, endpoint: str, payload: Any = None) -> Any:
        ...

    async def request_text(self, method: str, endpoint: str, payload: Any = None) -> str:
        ...


class RestTransport:
    """Bearer-token authenticated JSON transport on top of an aiohttp session."""

    def __init__(self, config: HaConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "authorization": f"Bearer {self._config.token}",
            "content-type": "application/json",
            "cache-control": "no-store",
            "user-agent": USER_AGENT,
        }

    async def request_text(self, method: str, endpoint: str, payload: Any = None) -> str:
        """Send a request and return the raw response body.

        Raises :class:`HaApiError` for non-2xx statuses and
        :class:`HaTransportError` for network failures and timeouts.
        """
        url = f"{self._config.api_root}{endpoint}"
        body = json.dumps(payload) if payload is not None else None

        if self._config.api_trace_enabled:
            _logger.debug("%s %s payload=%s", method, url, redact_for_log(payload))
        else:
            _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                data=body,
                headers=self._headers(),
                timeout=self._timeout,
                ssl=self._config.verify_ssl,
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise HaApiError(
                        f"API error: {resp.status} {resp.reason or ''} from {endpoint}".rstrip(),
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except HaTransportError:
            raise
        except TimeoutError as exc:
            raise HaTransportError(f"Request to {endpoint} timed out", endpoint=endpoint) from exc
        except aiohttp.ClientError as exc:
            raise HaTransportError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc

        if self._config.api_trace_enabled:
            _logger.debug("%s %s -> %s", method, url, redact_for_log(text, max_string=256))
        return text

    async def request_json(self, method: str, endpoint: str, payload: Any = None) -> Any:
        """Send a request and decode the JSON body.

        Some endpoints answer with an empty body; that decodes to ``{}``.
        """
        text = await self.request_text(method, endpoint, payload)
        if not text:
            return {}
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise HaTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

import logging
import time
from typing import Any, Dict, Optional

import httpx

from .models import Credentials


class WaterwheelError(Exception):
    """Base error for all waterwheel failures."""


class WaterwheelClientError(WaterwheelError):
    """Network or transport level failure."""


class WaterwheelHTTPError(WaterwheelClientError):
    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        response_json: Optional[Dict[str, Any]] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(f"{status_code} {method} {url}: {message}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.response_json = response_json
        self.response_text = response_text


class WaterwheelParseError(WaterwheelClientError):
    pass


class HttpTransport:
    """
    Shared HTTP transport for the entity REST API.
    - Credentials are supplied per call, so one transport serves every resource
    - Returns parsed JSON payloads
    - Never retries; failures propagate to the caller unchanged
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self.log = logger or logging.getLogger("waterwheel.client")

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout_seconds,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        credentials: Optional[Credentials] = None,
        resource: Optional[str] = None,
    ) -> Any:
        """
        Core request method.
        - Raises WaterwheelHTTPError on non-2xx HTTP responses
        - Raises WaterwheelClientError on network/timeout errors
        - Raises WaterwheelParseError if the body isn't valid JSON
        - Returns the parsed JSON value (object or array) on success
        """
        method = method.upper()
        auth = (
            httpx.BasicAuth(credentials.user, credentials.password)
            if credentials is not None
            else None
        )
        start = time.perf_counter()

        try:
            kwargs: Dict[str, Any] = {"params": params, "json": json}
            if auth is not None:
                kwargs["auth"] = auth
            resp = await self.http.request(method, url, **kwargs)
        except (httpx.ConnectError, httpx.ReadTimeout, httpx.ConnectTimeout) as exc:
            raise WaterwheelClientError(
                f"Network/timeout error calling {method} {url}: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise WaterwheelClientError(
                f"HTTPX error calling {method} {url}: {exc}"
            ) from exc

        duration_ms = int((time.perf_counter() - start) * 1000)
        self.log.debug(
            "op.request",
            extra={
                "resource": resource,
                "method": method,
                "url": str(resp.request.url),
                "status": resp.status_code,
                "duration_ms": duration_ms,
            },
        )

        if resp.status_code < 200 or resp.status_code >= 300:
            raise self._to_http_error(resp, method=method)

        return self._safe_json(resp)

    def _safe_json(self, resp: httpx.Response) -> Any:
        # 204 No Content, typically from DELETE
        if not resp.content:
            return {}

        try:
            data = resp.json()
        except ValueError as exc:
            snippet = (resp.text or "")[:500]
            raise WaterwheelParseError(
                f"Expected JSON from {resp.request.method} "
                f"{resp.request.url}, got non-JSON body snippet: "
                f"{snippet!r}"
            ) from exc

        return data

    def _to_http_error(
        self, resp: httpx.Response, *, method: str
    ) -> WaterwheelHTTPError:
        url = str(resp.request.url)
        response_json: Optional[Dict[str, Any]] = None
        response_text: Optional[str] = None
        message = "request failed"

        try:
            parsed = resp.json()
            if isinstance(parsed, dict):
                response_json = parsed
                # Drupal REST puts the reason under "message"
                message = parsed.get("message") or parsed.get("error") or message
        except ValueError:
            response_text = (resp.text or "")[:500]

        return WaterwheelHTTPError(
            status_code=resp.status_code,
            method=method,
            url=url,
            message=message,
            response_json=response_json,
            response_text=response_text,
        )

    async def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        credentials: Optional[Credentials] = None,
        resource: Optional[str] = None,
    ) -> Any:
        return await self.request(
            "GET", url, params=params, credentials=credentials, resource=resource
        )

    async def post(
        self,
        url: str,
        *,
        json: Any,
        params: Optional[Dict[str, Any]] = None,
        credentials: Optional[Credentials] = None,
        resource: Optional[str] = None,
    ) -> Any:
        return await self.request(
            "POST",
            url,
            params=params,
            json=json,
            credentials=credentials,
            resource=resource,
        )

    async def patch(
        self,
        url: str,
        *,
        json: Any,
        params: Optional[Dict[str, Any]] = None,
        credentials: Optional[Credentials] = None,
        resource: Optional[str] = None,
    ) -> Any:
        return await self.request(
            "PATCH",
            url,
            params=params,
            json=json,
            credentials=credentials,
            resource=resource,
        )

    async def delete(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        credentials: Optional[Credentials] = None,
        resource: Optional[str] = None,
    ) -> Any:
        return await self.request(
            "DELETE", url, params=params, credentials=credentials, resource=resource
        )

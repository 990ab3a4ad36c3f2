import logging
from collections import deque
from typing import Any, Literal

import httpx
from httpx import QueryParams, Response, Timeout
from loguru import logger

from canvaslms.exceptions import APIError, ConfigurationError, NetworkError
from canvaslms.utils.settings import get_settings

# Suppress verbose httpx debug logging
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

USER_AGENT = 'canvaslms-python/0.1.0'

SENSITIVE_HEADERS = {'authorization', 'cookie', 'set-cookie'}
SENSITIVE_KEYS = {'access_token', 'password', 'token', 'secret'}

HttpMethod = Literal['GET', 'POST', 'PUT', 'DELETE']
QueryTypes = QueryParams | dict[str, Any] | list[tuple[str, Any]] | None


def _sanitize_query(query: QueryParams | None, sensitive_keys: set[str] | None = None) -> list[tuple[str, str]] | None:
    """Remove sensitive query values before logging."""
    if query is None:
        return None
    sensitive_keys = sensitive_keys or SENSITIVE_KEYS
    return [(k, '[REDACTED]' if k.lower() in sensitive_keys else v) for k, v in query.multi_items()]


def _sanitize_headers(headers: dict | None) -> dict | None:
    """Remove sensitive headers before logging."""
    if headers is None:
        return None
    return {k: '[REDACTED]' if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


def _as_query(query: QueryTypes) -> QueryParams | None:
    if query is None:
        return None
    if isinstance(query, QueryParams):
        return query
    if isinstance(query, dict):
        # None values are dropped, same as an unset option
        query = {k: v for k, v in query.items() if v is not None}
    return QueryParams(query)


def _handle_response_error(response: Response) -> None:
    """Check response status and raise appropriate exception."""
    if response.status_code >= 400:
        try:
            error_body = response.json()
            error_msg = error_body.get('errors', error_body.get('message', response.text))
        except Exception:
            error_msg = response.text
        raise APIError(f"HTTP {response.status_code}: {error_msg}")


class Client:
    """Async transport for the Canvas REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        history_len: int = 30,
        timeout: float = 20.0
    ) -> None:
        """
        :param base_url: API root, defaults to the configured Canvas instance
        :param token: Access token, defaults to CANVAS_TOKEN
        :param history_len: Number of responses kept in :attr:`history`
        :param timeout: Request timeout in seconds
        :raises ConfigurationError: If no API root is configured
        """
        settings = get_settings()
        if base_url is None:
            base_url = settings.api_url if settings.base_url.strip() else ''
        if not base_url.strip():
            raise ConfigurationError("CANVAS_BASE_URL must be set to the Canvas instance URL")
        headers = {
            'accept': 'application/json',
            'user-agent': USER_AGENT,
        }
        token = token or settings.token
        if token:
            headers['authorization'] = f'Bearer {token}'

        self.http2_client = httpx.AsyncClient(
            http2=True,
            base_url=base_url,
            headers=headers,
            timeout=Timeout(timeout=timeout)
        )
        self.history: deque[Response] = deque(maxlen=history_len)

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.http2_client.aclose()

    async def request(
        self,
        method: HttpMethod,
        path: str,
        query: QueryTypes = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | Timeout | None = None
    ) -> Response:
        """
        Make an HTTP request and return the raw response.

        :param method: HTTP method (GET, POST, PUT, DELETE)
        :param path: Request path, relative to the API root
        :param query: Query parameters, repeated keys allowed
        :param data: JSON body data (for POST/PUT)
        :param headers: Additional headers
        :param timeout: Optional per-request timeout (seconds or Timeout object)
        :return: The response, with its body already read
        :raises NetworkError: On connection/timeout errors
        :raises APIError: On HTTP errors
        """
        params = _as_query(query)

        logger.debug(
            f'{method} request to {path}',
            query_params=_sanitize_query(params),
            headers=_sanitize_headers(headers)
        )

        try:
            request_kwargs: dict[str, Any] = {
                'url': path,
                'params': params,
                'headers': headers,
            }
            if method in ('POST', 'PUT'):
                request_kwargs['json'] = data
            if timeout is not None:
                request_kwargs['timeout'] = timeout

            response = await self.http2_client.request(method, **request_kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request timed out: {e}")
        except httpx.RequestError as e:
            raise NetworkError(f"Network error: {e}")

        self.history.append(response)
        logger.debug(f'Response ({response.status_code}) for {method} {path}')

        _handle_response_error(response)
        return response

    async def _request_json(
        self,
        method: HttpMethod,
        path: str,
        query: QueryTypes = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | Timeout | None = None
    ) -> Any:
        response = await self.request(method, path, query=query, data=data, headers=headers, timeout=timeout)
        try:
            json_body = response.json()
        except Exception:
            raise APIError(f'Non-JSON response ({response.status_code}): {response.text}')
        logger.debug(f'Response body: {json_body}')
        return json_body

    async def get(
        self,
        path: str,
        query: QueryTypes = None,
        headers: dict[str, str] | None = None,
        timeout: float | Timeout | None = None
    ) -> Any:
        return await self._request_json('GET', path, query=query, headers=headers, timeout=timeout)

    async def post(
        self,
        path: str,
        data: dict[str, Any] | None = None,
        query: QueryTypes = None,
        headers: dict[str, str] | None = None,
        timeout: float | Timeout | None = None
    ) -> Any:
        return await self._request_json('POST', path, query=query, data=data, headers=headers, timeout=timeout)

    async def put(
        self,
        path: str,
        data: dict[str, Any] | None = None,
        query: QueryTypes = None,
        headers: dict[str, str] | None = None,
        timeout: float | Timeout | None = None
    ) -> Any:
        return await self._request_json('PUT', path, query=query, data=data, headers=headers, timeout=timeout)

    async def delete(
        self,
        path: str,
        query: QueryTypes = None,
        headers: dict[str, str] | None = None,
        timeout: float | Timeout | None = None
    ) -> Any:
        return await self._request_json('DELETE', path, query=query, headers=headers, timeout=timeout)

    def add_default_headers(self, headers: dict) -> None:
        self.http2_client.headers.update(headers)

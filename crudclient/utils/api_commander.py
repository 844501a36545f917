# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import json
import logging
from types import TracebackType
from typing import Any, Iterable
from urllib.parse import quote, urljoin

import httpx

from crudclient.exceptions import (
    CreateRequestException,
    UnexpectedCrudResponseException,
    normalize_response_error,
)
from crudclient.settings.defaults import JSON_CONTENT_TYPE
from crudclient.utils.request_tools import (
    HttpMethod,
    log_httpx_request,
    log_httpx_response,
    redact_headers,
    to_httpx_timeout,
)

logger = logging.getLogger(__name__)


def quote_path_segment(segment: str) -> str:
    """Percent-encode a value (e.g. a document ID) used as one path segment."""
    return quote(segment, safe="")


class APICommander:
    """
    The executor of HTTP requests against a CRUD service collection.

    Request URLs are resolved against `base_url` (which is expected to end with
    a slash). Relative paths (e.g. "count") are appended to it, while absolute
    paths (e.g. "/-/healthz") are resolved against the service root.
    """

    def __init__(
        self,
        *,
        base_url: str,
        headers: dict[str, str | None] = {},
        redacted_header_names: Iterable[str] | None = None,
    ) -> None:
        self._client: httpx.Client | None = None
        self._async_client: httpx.AsyncClient | None = None
        self.base_url = base_url
        self.headers = headers
        self.redacted_header_names = set(redacted_header_names or [])
        self.full_headers: dict[str, str] = self._merge_headers(
            {
                "Content-Type": JSON_CONTENT_TYPE,
                "Accept": JSON_CONTENT_TYPE,
            },
            self.headers,
        )

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(base_url="{self.base_url}")'

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, APICommander):
            return all(
                [
                    self.base_url == other.base_url,
                    self.headers == other.headers,
                    self.redacted_header_names == other.redacted_header_names,
                ]
            )
        else:
            return False

    def __enter__(self) -> APICommander:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        self.close()

    async def __aenter__(self) -> APICommander:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self.aclose()

    @property
    def client(self) -> httpx.Client:
        # created on first use
        if self._client is None:
            self._client = httpx.Client()
        return self._client

    @property
    def async_client(self) -> httpx.AsyncClient:
        if self._async_client is None:
            self._async_client = httpx.AsyncClient()
        return self._async_client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    async def aclose(self) -> None:
        if self._async_client is not None:
            await self._async_client.aclose()

    @staticmethod
    def _merge_headers(
        base_headers: dict[str, str],
        override_headers: dict[str, str | None] | None,
    ) -> dict[str, str]:
        # a None value suppresses the header, matching is case-insensitive
        merged: dict[str, str] = dict(base_headers)
        for header_name, header_value in (override_headers or {}).items():
            for existing_name in [
                k for k in merged if k.lower() == header_name.lower()
            ]:
                del merged[existing_name]
            if header_value is not None:
                merged[header_name] = header_value
        return merged

    def _compose_request_url(
        self,
        additional_path: str | None,
        query_string: str | None,
    ) -> str:
        if not additional_path:
            request_url = self.base_url
        elif additional_path.startswith("/"):
            request_url = urljoin(self.base_url, additional_path)
        else:
            request_url = f"{self.base_url}{additional_path}"
        if query_string:
            return f"{request_url}?{query_string}"
        return request_url

    @staticmethod
    def _encode_payload(payload: Any) -> str | None:
        if payload is None:
            return None
        try:
            return json.dumps(
                payload,
                allow_nan=False,
                separators=(",", ":"),
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as exc:
            raise CreateRequestException(
                f"The request body cannot be encoded as JSON: {exc}"
            ) from exc

    @staticmethod
    def _raw_response_to_json(raw_response: httpx.Response) -> Any:
        try:
            return json.loads(raw_response.text)
        except ValueError:
            raise UnexpectedCrudResponseException(
                text="Unparseable response from the CRUD service.",
                raw_response=raw_response.text,
            )

    def _prepare(
        self,
        *,
        http_method: str,
        payload: Any,
        additional_path: str | None,
        query_string: str | None,
        headers: dict[str, str | None] | None,
        timeout_ms: int | None,
    ) -> tuple[str, str | None, dict[str, str]]:
        request_url = self._compose_request_url(additional_path, query_string)
        encoded_payload = self._encode_payload(payload)
        request_headers = self._merge_headers(self.full_headers, headers)
        log_httpx_request(
            http_method=http_method,
            full_url=request_url,
            redacted_request_headers=redact_headers(
                request_headers, self.redacted_header_names
            ),
            encoded_payload=encoded_payload,
            timeout_ms=timeout_ms,
        )
        return request_url, encoded_payload, request_headers

    def _check_response(self, raw_response: httpx.Response) -> None:
        log_httpx_response(response=raw_response)
        try:
            raw_response.raise_for_status()
        except httpx.HTTPStatusError as http_exc:
            logger.warning(
                "APICommander about to raise from: "
                f"{raw_response.status_code} on '{raw_response.request.url}'"
            )
            raise normalize_response_error(http_exc) from http_exc

    def raw_request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        payload: Any = None,
        additional_path: str | None = None,
        query_string: str | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> httpx.Response:
        request_url, encoded_payload, request_headers = self._prepare(
            http_method=http_method,
            payload=payload,
            additional_path=additional_path,
            query_string=query_string,
            headers=headers,
            timeout_ms=timeout_ms,
        )
        raw_response = self.client.request(
            method=http_method,
            url=request_url,
            content=encoded_payload.encode() if encoded_payload is not None else None,
            timeout=to_httpx_timeout(timeout_ms),
            headers=request_headers,
        )
        self._check_response(raw_response)
        return raw_response

    async def async_raw_request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        payload: Any = None,
        additional_path: str | None = None,
        query_string: str | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> httpx.Response:
        request_url, encoded_payload, request_headers = self._prepare(
            http_method=http_method,
            payload=payload,
            additional_path=additional_path,
            query_string=query_string,
            headers=headers,
            timeout_ms=timeout_ms,
        )
        raw_response = await self.async_client.request(
            method=http_method,
            url=request_url,
            content=encoded_payload.encode() if encoded_payload is not None else None,
            timeout=to_httpx_timeout(timeout_ms),
            headers=request_headers,
        )
        self._check_response(raw_response)
        return raw_response

    def request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        payload: Any = None,
        additional_path: str | None = None,
        query_string: str | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> Any:
        raw_response = self.raw_request(
            http_method=http_method,
            payload=payload,
            additional_path=additional_path,
            query_string=query_string,
            headers=headers,
            timeout_ms=timeout_ms,
        )
        return self._raw_response_to_json(raw_response)

    async def async_request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        payload: Any = None,
        additional_path: str | None = None,
        query_string: str | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> Any:
        raw_response = await self.async_raw_request(
            http_method=http_method,
            payload=payload,
            additional_path=additional_path,
            query_string=query_string,
            headers=headers,
            timeout_ms=timeout_ms,
        )
        return self._raw_response_to_json(raw_response)

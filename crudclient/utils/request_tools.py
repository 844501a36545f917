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

import logging
from typing import Iterable

import httpx

from crudclient.settings.defaults import (
    DEFAULT_REDACTED_HEADER_NAMES,
    FIXED_SECRET_PLACEHOLDER,
)

logger = logging.getLogger(__name__)


def log_httpx_request(
    http_method: str,
    full_url: str,
    redacted_request_headers: dict[str, str],
    encoded_payload: str | None,
    timeout_ms: int | None,
) -> None:
    """
    Log the details of an HTTP request for debugging purposes.

    Args:
        http_method: the HTTP verb of the request (e.g. "PATCH").
        full_url: the URL of the request, query string included
            (e.g. "http://crud-service/books/count?_l=5").
        redacted_request_headers: caution, as these will be logged as they are.
        encoded_payload: the payload (as a string) sent with the request, if any.
        timeout_ms: the timeout in milliseconds, if any is set.
    """
    logger.debug(f"Request URL: {http_method} {full_url}")
    if redacted_request_headers:
        logger.debug(f"Request headers: '{redacted_request_headers}'")
    if encoded_payload is not None:
        logger.debug(f"Request payload: '{encoded_payload}'")
    logger.debug(f"Timeout (ms): {timeout_ms or '(unset)'}")


def log_httpx_response(response: httpx.Response) -> None:
    """
    Log the details of an httpx.Response.

    Args:
        response: the httpx.Response object to log.
    """
    logger.debug(f"Response status code: {response.status_code}")
    logger.debug(f"Response headers: '{response.headers}'")
    logger.debug(f"Response text: '{response.text}'")


def redact_headers(
    headers: dict[str, str],
    redacted_header_names: Iterable[str],
) -> dict[str, str]:
    upper_redacted = {
        header_name.upper()
        for header_name in set(redacted_header_names) | DEFAULT_REDACTED_HEADER_NAMES
    }
    return {
        k: v if k.upper() not in upper_redacted else FIXED_SECRET_PLACEHOLDER
        for k, v in headers.items()
    }


class HttpMethod:
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


def to_httpx_timeout(timeout_ms: int | None) -> httpx.Timeout | None:
    if timeout_ms is None or timeout_ms == 0:
        return None
    else:
        return httpx.Timeout(timeout_ms / 1000)

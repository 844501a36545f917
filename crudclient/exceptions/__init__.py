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

import httpx

from crudclient.exceptions.crud_exceptions import (
    CreateClientException,
    CreateRequestException,
    CrudClientException,
    CrudErrorResponse,
    CrudHttpException,
    CrudResponseException,
    MalformedFilterException,
    UnexpectedCrudResponseException,
)
from crudclient.settings.defaults import JSON_CONTENT_TYPE


def normalize_response_error(error: BaseException) -> BaseException:
    """
    Turn the failure of an HTTP exchange with the CRUD service into the
    exception that should reach the caller.

    - Anything other than an `httpx.HTTPStatusError` (e.g. a connection error
      or a timeout) is returned unchanged.
    - If the response declares a JSON content type (the `Content-Type` header
      starts with "application/json") and has a non-empty body, the body is
      parsed into a CrudErrorResponse. If this parsing fails, the parsing
      error itself is returned (a `ValueError` such as `json.JSONDecodeError`,
      or an `UnexpectedCrudResponseException` for well-formed JSON of the
      wrong shape).
    - In all other cases the structured error body stays empty.

    Args:
        error: the exception raised while executing the request.

    Returns:
        the exception to raise: a CrudHttpException for upstream errors
        (see its docstring for how the message is chosen), otherwise one of
        the exceptions described above.
    """

    if not isinstance(error, httpx.HTTPStatusError):
        return error

    response = error.response
    raw_body = response.content
    error_response = CrudErrorResponse()
    content_type = response.headers.get("Content-Type", "")
    if content_type.startswith(JSON_CONTENT_TYPE) and raw_body:
        try:
            error_dict = json.loads(raw_body)
        except ValueError as decode_error:
            return decode_error
        if not isinstance(error_dict, dict):
            return UnexpectedCrudResponseException(
                text="Error response from the CRUD service is not a JSON object.",
                raw_response=error_dict,
            )
        try:
            error_response = CrudErrorResponse.from_dict(error_dict)
        except UnexpectedCrudResponseException as shape_error:
            return shape_error

    return CrudHttpException.from_httpx_error(error, error_response=error_response)


__all__ = [
    "CreateClientException",
    "CreateRequestException",
    "CrudClientException",
    "CrudErrorResponse",
    "CrudHttpException",
    "CrudResponseException",
    "MalformedFilterException",
    "UnexpectedCrudResponseException",
    "normalize_response_error",
]

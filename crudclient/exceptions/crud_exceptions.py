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

from dataclasses import dataclass
from typing import Any

import httpx

from crudclient.settings.defaults import EMPTY_ERROR_BODY_MESSAGE


class CrudClientException(Exception):
    """
    Any exception raised on purpose by this library, such as:
      - the client is being created with an invalid base URL,
      - the CRUD service returned an HTTP error response,
      - a response body cannot be decoded into the expected shape,
    but not, for instance,
      - a network error while sending an HTTP request to the service
        (the underlying httpx exception propagates unchanged).
    """

    pass


@dataclass
class CreateClientException(CrudClientException):
    """
    A client cannot be created, typically because the provided base URL is
    not an absolute http(s) URL. No request is ever attempted in this case.

    Attributes:
        text: a text message about the exception.
        base_url: the base URL that was rejected.
    """

    text: str
    base_url: str

    def __init__(self, text: str, *, base_url: str) -> None:
        super().__init__(text)
        self.text = text
        self.base_url = base_url


@dataclass
class CreateRequestException(CrudClientException):
    """
    A request cannot be built, for instance because the body or the mongo
    query to send are not JSON-serializable.

    Attributes:
        text: a text message about the exception.
    """

    text: str

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text


class CrudResponseException(CrudClientException):
    """
    The CRUD service replied with an error. This is the class to test against
    (e.g. in an `except` clause) to tell upstream errors apart from every other
    failure, regardless of the message they carry.
    """

    pass


@dataclass
class CrudErrorResponse:
    """
    The structured content of an error body returned by the CRUD service,
    such as `{"message": "not found", "statusCode": 404, "error": "Not Found"}`.
    Fields missing from the body are None.

    Attributes:
        message: the text found in the "message" field.
        status_code: the integer found in the "statusCode" field.
        error: the error kind found in the "error" field.
    """

    message: str | None = None
    status_code: int | None = None
    error: str | None = None

    @staticmethod
    def from_dict(error_dict: dict[str, Any]) -> CrudErrorResponse:
        """
        Parse the JSON object of an error body into this structure.

        Raises:
            UnexpectedCrudResponseException: if any of the known fields
                has the wrong type.
        """

        message = error_dict.get("message")
        status_code = error_dict.get("statusCode")
        error = error_dict.get("error")
        if message is not None and not isinstance(message, str):
            raise UnexpectedCrudResponseException(
                text="Error response has a non-string 'message' field.",
                raw_response=error_dict,
            )
        if status_code is not None and (
            isinstance(status_code, bool) or not isinstance(status_code, int)
        ):
            raise UnexpectedCrudResponseException(
                text="Error response has a non-integer 'statusCode' field.",
                raw_response=error_dict,
            )
        if error is not None and not isinstance(error, str):
            raise UnexpectedCrudResponseException(
                text="Error response has a non-string 'error' field.",
                raw_response=error_dict,
            )
        return CrudErrorResponse(
            message=message,
            status_code=status_code,
            error=error,
        )


@dataclass
class CrudHttpException(CrudResponseException, httpx.HTTPStatusError):
    """
    A request to the CRUD service resulted in an HTTP 4xx or 5xx response.

    The purpose of this class is to present the error body in a structured way
    while still raising (a subclass of) `httpx.HTTPStatusError`. The string
    representation of the exception is the error message alone: the "message"
    field of a JSON error body if present, else the raw body text, else a fixed
    notice that the body was empty.

    Attributes:
        text: the resolved error message.
        status_code: the HTTP status code of the response.
        raw_body: the response body, as bytes.
        error_response: a CrudErrorResponse with the parsed body fields
            (all None if the body was not parsed as JSON).
        httpx_error: the original httpx.HTTPStatusError.
    """

    text: str
    status_code: int
    raw_body: bytes
    error_response: CrudErrorResponse

    def __init__(
        self,
        text: str,
        *,
        httpx_error: httpx.HTTPStatusError,
        status_code: int,
        raw_body: bytes,
        error_response: CrudErrorResponse,
    ) -> None:
        CrudResponseException.__init__(self, text)
        httpx.HTTPStatusError.__init__(
            self,
            message=str(httpx_error),
            request=httpx_error.request,
            response=httpx_error.response,
        )
        self.text = text
        self.httpx_error = httpx_error
        self.status_code = status_code
        self.raw_body = raw_body
        self.error_response = error_response

    def __str__(self) -> str:
        return self.text

    @classmethod
    def from_httpx_error(
        cls,
        httpx_error: httpx.HTTPStatusError,
        *,
        error_response: CrudErrorResponse,
    ) -> CrudHttpException:
        """
        Build this exception out of an httpx status error and the (possibly
        empty) structured error body extracted from its response.
        """

        raw_body = httpx_error.response.content
        if error_response.message:
            text = error_response.message
        elif raw_body:
            text = raw_body.decode(errors="replace")
        else:
            text = EMPTY_ERROR_BODY_MESSAGE

        return cls(
            text=text,
            httpx_error=httpx_error,
            status_code=httpx_error.response.status_code,
            raw_body=raw_body,
            error_response=error_response,
        )


@dataclass
class UnexpectedCrudResponseException(CrudClientException):
    """
    A response from the CRUD service cannot be decoded into the expected shape:
    for instance it is not valid JSON, or a count endpoint did not return a number.

    Attributes:
        text: a text message about the exception.
        raw_response: the offending response content, if available.
    """

    text: str
    raw_response: Any

    def __init__(
        self,
        text: str,
        raw_response: Any = None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.raw_response = raw_response


@dataclass
class MalformedFilterException(CrudClientException, ValueError):
    """
    The JSON form of a bulk-patch filter cannot be decoded: the embedded
    "_q" query is not a JSON string holding valid JSON, or some other field
    value is not a string.

    Attributes:
        text: a text message about the exception.
        raw_filter: the offending filter document (as received).
    """

    text: str
    raw_filter: Any

    def __init__(self, text: str, *, raw_filter: Any = None) -> None:
        super().__init__(text)
        self.text = text
        self.raw_filter = raw_filter

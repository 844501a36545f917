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
from typing import Iterable

from crudclient.settings.defaults import (
    DEFAULT_REQUEST_TIMEOUT_MS,
)
from crudclient.utils.request_tools import redact_headers
from crudclient.utils.unset import _UNSET, UnsetType


@dataclass
class TimeoutOptions:
    """
    The group of settings for the API Options concerning the configured timeouts.

    All timeout values are integers expressed in milliseconds. A timeout of zero
    signifies that no timeout is imposed at all.

    All client methods allow for a per-invocation override of the timeout
    through their `timeout_ms` parameter.

    This class is used to override default settings when creating clients.
    Values that are left unspecified will keep the values inherited from the
    defaults (or from the client being copied).

    Attributes:
        request_timeout_ms: the timeout imposed on a single HTTP request
            to the CRUD service. Defaults to 10 s.
    """

    request_timeout_ms: int | UnsetType = _UNSET


@dataclass
class FullTimeoutOptions(TimeoutOptions):
    """
    The group of settings for the API Options concerning the configured timeouts.

    This is the "full" version of the class, with the guarantee that all of its
    members have defined values. As such, this is what clients have in their
    `.api_options.timeout_options` attribute.

    Attributes:
        request_timeout_ms: the timeout imposed on a single HTTP request
            to the CRUD service. Zero means no timeout.
    """

    request_timeout_ms: int

    def __init__(self, *, request_timeout_ms: int) -> None:
        TimeoutOptions.__init__(self, request_timeout_ms=request_timeout_ms)

    def with_override(self, other: TimeoutOptions) -> FullTimeoutOptions:
        """
        Given an "overriding" set of options, possibly not defined in all its
        attributes, apply the override logic and return a new full options object.

        Args:
            other: a not-necessarily-fully-specified options object. All its defined
                settings take precedence.
        """

        return FullTimeoutOptions(
            request_timeout_ms=(
                other.request_timeout_ms
                if not isinstance(other.request_timeout_ms, UnsetType)
                else self.request_timeout_ms
            ),
        )


@dataclass
class APIOptions:
    """
    This class represents all settings that can be configured for how a client
    interacts with the CRUD service.

    Every attribute may be left unset: when passed to a client constructor
    (or to its `with_options` method), only the defined attributes
    override the settings the client would otherwise get.

    Attributes:
        headers: free-form dictionary of additional headers sent with each
            request. Passing a key with a value of None means that a certain
            header is suppressed when issuing the request.
        redacted_header_names: an iterable of (case-insensitive) strings denoting
            the headers that contain secrets, thus are to be masked when logging
            request details.
        timeout_options: an instance of `TimeoutOptions` to control the timeout
            behavior of the requests.

    Example:
        >>> from crudclient import CrudClient
        >>> from crudclient.api_options import APIOptions, TimeoutOptions
        >>>
        >>> options = APIOptions(
        ...     headers={"client-key": "abc"},
        ...     timeout_options=TimeoutOptions(request_timeout_ms=2000),
        ... )
        >>> books = CrudClient("http://crud-service/books/", api_options=options)
    """

    headers: dict[str, str | None] | UnsetType = _UNSET
    redacted_header_names: Iterable[str] | UnsetType = _UNSET
    timeout_options: TimeoutOptions | UnsetType = _UNSET

    def __init__(
        self,
        *,
        headers: dict[str, str | None] | UnsetType = _UNSET,
        redacted_header_names: Iterable[str] | UnsetType = _UNSET,
        timeout_options: TimeoutOptions | UnsetType = _UNSET,
    ) -> None:
        self.headers = headers
        # redacted_header_names are normalized into a set
        self.redacted_header_names = (
            _UNSET
            if isinstance(redacted_header_names, UnsetType)
            else set(redacted_header_names)
        )
        self.timeout_options = timeout_options

    def __repr__(self) -> str:
        # special handling of the headers, whose values may be secrets
        _redacted_header_names = (
            set()
            if isinstance(self.redacted_header_names, UnsetType)
            else self.redacted_header_names
        )
        _headers: dict[str, str | None] | UnsetType
        if isinstance(self.headers, UnsetType):
            _headers = _UNSET
        else:
            _redacted = redact_headers(
                {k: v for k, v in self.headers.items() if v is not None},
                _redacted_header_names,
            )
            _headers = {k: _redacted.get(k) for k in self.headers}
        pieces = [
            f"{field_name}={field_value!r}"
            for field_name, field_value in (
                ("headers", _headers),
                ("redacted_header_names", self.redacted_header_names),
                ("timeout_options", self.timeout_options),
            )
            if not isinstance(field_value, UnsetType)
        ]
        inner_desc = ", ".join(pieces)
        return f"{self.__class__.__name__}({inner_desc})"


@dataclass(repr=False)
class FullAPIOptions(APIOptions):
    """
    This class represents all settings that can be configured for how a client
    interacts with the CRUD service.

    This is the "full" version of the class, with the guarantee that all of its
    members have defined values. As such, this is what clients have as their
    `.api_options` attribute -- as opposed to the (non-full) `APIOptions`
    counterpart class, which admits "unset" attributes and is used to override
    specific settings.

    Attributes:
        headers: free-form dictionary of additional headers sent with each
            request. A None value suppresses the header.
        redacted_header_names: a set of (case-insensitive) strings denoting the
            headers that contain secrets, thus are to be masked when logging.
        timeout_options: an instance of `FullTimeoutOptions`.
    """

    headers: dict[str, str | None]
    redacted_header_names: set[str]
    timeout_options: FullTimeoutOptions

    def __init__(
        self,
        *,
        headers: dict[str, str | None],
        redacted_header_names: Iterable[str],
        timeout_options: FullTimeoutOptions,
    ) -> None:
        APIOptions.__init__(
            self,
            headers=headers,
            redacted_header_names=redacted_header_names,
            timeout_options=timeout_options,
        )

    def with_override(self, other: APIOptions | None) -> FullAPIOptions:
        """
        Given an "overriding" set of options, possibly not defined in all its
        attributes, apply the override logic and return a new full options object.

        Headers and redacted header names are merged (the override winning on
        a per-header basis), while the timeout options are overridden field
        by field.

        Args:
            other: a not-necessarily-fully-specified options object. All its defined
                settings take precedence. Passing None is the same as passing
                a completely unset object.
        """

        if other is None:
            return self

        headers: dict[str, str | None]
        if isinstance(other.headers, UnsetType):
            headers = self.headers
        else:
            headers = {**self.headers, **other.headers}

        redacted_header_names: set[str]
        if isinstance(other.redacted_header_names, UnsetType):
            redacted_header_names = self.redacted_header_names
        else:
            redacted_header_names = self.redacted_header_names | set(
                other.redacted_header_names
            )

        timeout_options: FullTimeoutOptions
        if isinstance(other.timeout_options, UnsetType):
            timeout_options = self.timeout_options
        else:
            timeout_options = self.timeout_options.with_override(
                other.timeout_options
            )

        return FullAPIOptions(
            headers=headers,
            redacted_header_names=redacted_header_names,
            timeout_options=timeout_options,
        )


defaultTimeoutOptions = FullTimeoutOptions(
    request_timeout_ms=DEFAULT_REQUEST_TIMEOUT_MS,
)


defaultAPIOptions = FullAPIOptions(
    headers={},
    redacted_header_names=set(),
    timeout_options=defaultTimeoutOptions,
)

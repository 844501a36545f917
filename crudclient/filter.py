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
from dataclasses import dataclass
from typing import Any, Iterable
from urllib.parse import urlencode

from crudclient.constants import MongoQueryType
from crudclient.exceptions import CreateRequestException
from crudclient.settings.defaults import (
    LIMIT_PARAM,
    MONGO_QUERY_PARAM,
    PROJECTION_PARAM,
    SKIP_PARAM,
    SORT_PARAM,
)
from crudclient.utils.meta import check_deprecated_alias

logger = logging.getLogger(__name__)


@dataclass
class Filter:
    """
    The query parameters controlling which documents an operation targets
    and how the results are shaped.

    All attributes are optional: a zero value (None, empty, or 0 for the
    integers) means the corresponding query parameter is not sent at all.

    Attributes:
        fields: plain field-equality conditions, sent verbatim as query
            parameters (e.g. `{"author": "Calvino"}` becomes `author=Calvino`).
        mongo_query: an arbitrarily nested MongoDB-style predicate, sent as
            JSON text in the `_q` parameter.
        limit: maximum number of documents to return (`_l`).
        projection: the list of fields to return (`_p`).
        skip: number of documents to skip (`_sk`).
        sort: the sort specification, as understood by the service (`_s`).

    Example:
        >>> from crudclient import Filter
        >>> Filter(
        ...     fields={"author": "Calvino"},
        ...     mongo_query={"year": {"$gt": 1960}},
        ...     limit=10,
        ...     projection=["title", "year"],
        ...     sort="-year",
        ... ).to_query_string()
        'author=Calvino&_q=%7B%22year%22%3A%7B%22%24gt%22%3A1960%7D%7D&_l=10&_p=title%2Cyear&_s=-year'
    """

    fields: dict[str, str] | None
    mongo_query: MongoQueryType | None
    limit: int
    projection: list[str] | None
    skip: int
    sort: str | None

    def __init__(
        self,
        *,
        fields: dict[str, str] | None = None,
        mongo_query: MongoQueryType | None = None,
        limit: int = 0,
        projection: Iterable[str] | None = None,
        skip: int = 0,
        sort: str | None = None,
        fileds_query: dict[str, str] | None = None,
    ) -> None:
        self.fields = check_deprecated_alias(
            new_value=fields,
            deprecated_value=fileds_query,
            new_name="fields",
            deprecated_name="fileds_query",
        )
        self.mongo_query = mongo_query
        self.limit = limit
        self.projection = list(projection) if projection is not None else None
        self.skip = skip
        self.sort = sort

    def to_query_params(self) -> dict[str, str]:
        """Return the query parameters for this filter, in emission order."""
        return filter_to_query_params(self)

    def to_query_string(self) -> str:
        """Return the percent-encoded query string for this filter."""
        return encode_query(self)


def encode_mongo_query(mongo_query: Any) -> str:
    """
    Encode a mongo query as canonical JSON text: compact separators and
    sorted keys, so that equal queries always give the same string.

    Raises:
        CreateRequestException: if the query is not JSON-serializable.
    """
    try:
        return json.dumps(
            mongo_query,
            allow_nan=False,
            separators=(",", ":"),
            ensure_ascii=False,
            sort_keys=True,
        )
    except (TypeError, ValueError) as exc:
        raise CreateRequestException(
            f"The mongo query cannot be encoded as JSON: {exc}"
        ) from exc


def filter_to_query_params(filter: Filter | None) -> dict[str, str]:
    """
    Compute the query parameters expressing a filter.

    The parameters are emitted in a fixed order: the structured fields first,
    then `_q` (mongo query), `_l` (limit), `_p` (projection), `_sk` (skip) and
    `_s` (sort). Zero-valued attributes contribute nothing.

    A structured field named like a reserved parameter is overwritten by the
    latter, which comes later in the emission order (last write wins).

    Args:
        filter: the filter to encode. None is treated as an empty filter.

    Returns:
        an insertion-ordered dictionary of parameter names to string values.

    Raises:
        CreateRequestException: if the mongo query is not JSON-serializable.
    """

    params: dict[str, str] = {}
    if filter is None:
        return params

    def _set(name: str, value: str) -> None:
        if name in params:
            logger.debug(
                f"Query parameter '{name}' from the filter fields is overwritten "
                "by the reserved parameter with the same name."
            )
        params[name] = value

    if filter.fields:
        for field_name, field_value in filter.fields.items():
            params[field_name] = field_value

    if filter.mongo_query:
        _set(MONGO_QUERY_PARAM, encode_mongo_query(filter.mongo_query))

    if filter.limit != 0:
        _set(LIMIT_PARAM, str(filter.limit))

    if filter.projection:
        _set(PROJECTION_PARAM, ",".join(filter.projection))

    if filter.skip != 0:
        _set(SKIP_PARAM, str(filter.skip))

    if filter.sort:
        _set(SORT_PARAM, filter.sort)

    return params


def encode_query(filter: Filter | None) -> str:
    """
    Encode a filter into the percent-encoded query string sent to the service.

    Deterministic and side-effect free: the same filter always yields the
    same string. An empty filter yields an empty string.

    Args:
        filter: the filter to encode. None is treated as an empty filter.

    Returns:
        the query string (without the leading "?").
    """

    return urlencode(list(filter_to_query_params(filter).items()))

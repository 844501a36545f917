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
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from typing_extensions import override

from crudclient.constants import MongoQueryType
from crudclient.exceptions import (
    MalformedFilterException,
    UnexpectedCrudResponseException,
)
from crudclient.filter import encode_mongo_query
from crudclient.settings.defaults import MONGO_QUERY_PARAM

# attribute name -> wire operator, in serialization order
PATCH_OPERATORS: list[tuple[str, str]] = [
    ("set", "$set"),
    ("unset", "$unset"),
    ("inc", "$inc"),
    ("mul", "$mul"),
    ("current_date", "$currentDate"),
    ("push", "$push"),
    ("pull", "$pull"),
    ("add_to_set", "$addToSet"),
]
UPSERT_ONLY_OPERATORS: list[tuple[str, str]] = [
    ("set_on_insert", "$setOnInsert"),
]


def _operators_from_dict(
    body_dict: Mapping[str, Any],
    operators: list[tuple[str, str]],
    body_kind: str,
) -> dict[str, Any]:
    attr_by_operator = {op_name: attr_name for attr_name, op_name in operators}
    unknown = [key for key in body_dict if key not in attr_by_operator]
    if unknown:
        raise ValueError(f"Unsupported operator(s) for a {body_kind}: {unknown}.")
    return {
        attr_by_operator[op_name]: op_value
        for op_name, op_value in body_dict.items()
    }


@dataclass
class PatchBody:
    """
    The body of a patch request, made of MongoDB-style update operators.

    Each attribute carries the payload of one operator. Attributes left to None
    are not sent at all; the operators that are set are serialized in a fixed
    order (`$set`, `$unset`, `$inc`, `$mul`, `$currentDate`, `$push`, `$pull`,
    `$addToSet`).

    Attributes:
        set: the `$set` payload, e.g. `{"title": "Marcovaldo"}`.
        unset: the `$unset` payload.
        inc: the `$inc` payload.
        mul: the `$mul` payload.
        current_date: the `$currentDate` payload.
        push: the `$push` payload.
        pull: the `$pull` payload.
        add_to_set: the `$addToSet` payload,
            e.g. `{"tags": {"$each": ["a", "b"]}}`.

    Example:
        >>> from crudclient import PatchBody
        >>> PatchBody(set={"price": 12}, inc={"reprints": 1}).to_dict()
        {'$set': {'price': 12}, '$inc': {'reprints': 1}}
    """

    set: dict[str, Any] | None = None
    unset: dict[str, Any] | None = None
    inc: dict[str, Any] | None = None
    mul: dict[str, Any] | None = None
    current_date: dict[str, Any] | None = None
    push: dict[str, Any] | None = None
    pull: dict[str, Any] | None = None
    add_to_set: dict[str, Any] | None = None

    def _operators(self) -> list[tuple[str, str]]:
        return PATCH_OPERATORS

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form of this body, omitting unset operators."""
        return {
            op_name: getattr(self, attr_name)
            for attr_name, op_name in self._operators()
            if getattr(self, attr_name) is not None
        }

    @classmethod
    def from_dict(cls, body_dict: Mapping[str, Any]) -> PatchBody:
        """
        Create a body from its wire form, e.g. `{"$set": {"a": 1}}`.

        Raises:
            ValueError: if an operator is not among the supported ones.
        """
        return cls(**_operators_from_dict(body_dict, PATCH_OPERATORS, "patch"))


@dataclass
class UpsertBody(PatchBody):
    """
    The body of an upsert request: all the operators of a PatchBody, plus
    `$setOnInsert` (serialized last) for the fields to write only when the
    document is created.

    Attributes:
        set_on_insert: the `$setOnInsert` payload.
    """

    set_on_insert: dict[str, Any] | None = None

    @override
    def _operators(self) -> list[tuple[str, str]]:
        return PATCH_OPERATORS + UPSERT_ONLY_OPERATORS

    @classmethod
    @override
    def from_dict(cls, body_dict: Mapping[str, Any]) -> UpsertBody:
        return cls(
            **_operators_from_dict(
                body_dict,
                PATCH_OPERATORS + UPSERT_ONLY_OPERATORS,
                "upsert",
            )
        )


@dataclass
class PatchBulkFilter:
    """
    The filter selecting the documents affected by one item of a bulk patch.

    On the wire this is a single flat JSON object: the plain string pairs of
    `fields`, plus the mongo query embedded as JSON *text* under the "_q" key.

    Attributes:
        fields: plain field-equality conditions.
        mongo_query: a MongoDB-style predicate.

    Example:
        >>> from crudclient import PatchBulkFilter
        >>> PatchBulkFilter(
        ...     fields={"author": "Calvino"},
        ...     mongo_query={"year": 1963},
        ... ).to_dict()
        {'_q': '{"year":1963}', 'author': 'Calvino'}
    """

    fields: dict[str, str] | None = None
    mongo_query: MongoQueryType | None = None

    def to_dict(self) -> dict[str, str]:
        return serialize_bulk_filter(self)

    @staticmethod
    def from_dict(raw_filter: str | bytes | Mapping[str, Any]) -> PatchBulkFilter:
        return deserialize_bulk_filter(raw_filter)


def serialize_bulk_filter(bulk_filter: PatchBulkFilter) -> dict[str, str]:
    """
    Compute the flat JSON object expressing a bulk-patch filter.

    The mongo query, if any, is stored as canonical JSON text (sorted keys)
    under "_q"; the plain fields are then added on top of it. Empty fields
    or queries are treated as absent.

    Args:
        bulk_filter: the filter to serialize.

    Returns:
        a dictionary with string values only, ready to be JSON-encoded.

    Raises:
        CreateRequestException: if the mongo query is not JSON-serializable.
    """

    serialized: dict[str, str] = {}
    if bulk_filter.mongo_query:
        serialized[MONGO_QUERY_PARAM] = encode_mongo_query(bulk_filter.mongo_query)
    if bulk_filter.fields:
        serialized.update(bulk_filter.fields)
    return serialized


def deserialize_bulk_filter(
    raw_filter: str | bytes | Mapping[str, Any],
) -> PatchBulkFilter:
    """
    Parse the flat JSON form of a bulk-patch filter back into a PatchBulkFilter.

    Args:
        raw_filter: either the JSON text of the filter object or the
            already-parsed object.

    Returns:
        a PatchBulkFilter. Empty fields or queries, and a "_q" holding
        the JSON text "null", come back as None.

    Raises:
        MalformedFilterException: if the input is not a JSON object, if "_q"
            is not a string holding valid JSON text, or if any other value
            is not a string.
    """

    filter_obj: Any
    if isinstance(raw_filter, (str, bytes)):
        try:
            filter_obj = json.loads(raw_filter)
        except ValueError as exc:
            raise MalformedFilterException(
                f"Bulk filter is not valid JSON: {exc}",
                raw_filter=raw_filter,
            ) from exc
    else:
        filter_obj = raw_filter

    if not isinstance(filter_obj, Mapping):
        raise MalformedFilterException(
            "Bulk filter is not a JSON object.",
            raw_filter=raw_filter,
        )

    mongo_query: MongoQueryType | None = None
    fields: dict[str, str] = {}
    for key, value in filter_obj.items():
        if key == MONGO_QUERY_PARAM:
            if not isinstance(value, str):
                raise MalformedFilterException(
                    f"Bulk filter '{MONGO_QUERY_PARAM}' must be a string "
                    f"holding JSON text, found {type(value).__name__}.",
                    raw_filter=raw_filter,
                )
            try:
                mongo_query = json.loads(value)
            except ValueError as exc:
                raise MalformedFilterException(
                    f"Bulk filter '{MONGO_QUERY_PARAM}' is not valid JSON: {exc}",
                    raw_filter=raw_filter,
                ) from exc
            # a JSON null stands for no query at all
            if mongo_query is not None and not isinstance(mongo_query, dict):
                raise MalformedFilterException(
                    f"Bulk filter '{MONGO_QUERY_PARAM}' is not a JSON object.",
                    raw_filter=raw_filter,
                )
        elif isinstance(value, str):
            fields[key] = value
        else:
            raise MalformedFilterException(
                f"Bulk filter field '{key}' must be a string, "
                f"found {type(value).__name__}.",
                raw_filter=raw_filter,
            )

    return PatchBulkFilter(
        fields=fields or None,
        mongo_query=mongo_query or None,
    )


@dataclass
class PatchBulkItem:
    """
    One element of a bulk patch: the filter selecting documents and the
    update to apply to them.

    Attributes:
        filter: a PatchBulkFilter.
        update: a PatchBody.
    """

    filter: PatchBulkFilter
    update: PatchBody

    def to_dict(self) -> dict[str, Any]:
        return {
            "filter": serialize_bulk_filter(self.filter),
            "update": self.update.to_dict(),
        }

    @staticmethod
    def from_dict(item_dict: Mapping[str, Any]) -> PatchBulkItem:
        return PatchBulkItem(
            filter=deserialize_bulk_filter(item_dict.get("filter") or {}),
            update=PatchBody.from_dict(item_dict.get("update") or {}),
        )


PatchBulkBody = List[PatchBulkItem]


@dataclass
class CreatedResource:
    """
    The identifier of one document inserted through a create-many request.

    Attributes:
        id: the "_id" assigned by the service.
    """

    id: str

    @staticmethod
    def from_dict(raw_dict: Dict[str, Any]) -> CreatedResource:
        """
        Raises:
            UnexpectedCrudResponseException: if "_id" is missing or
                is not a string.
        """
        created_id = raw_dict.get("_id")
        if not isinstance(created_id, str):
            raise UnexpectedCrudResponseException(
                text="Faulty created resource: a string '_id' was expected.",
                raw_response=raw_dict,
            )
        return CreatedResource(id=created_id)



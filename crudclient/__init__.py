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

import importlib.metadata


def get_version() -> str:
    try:
        return importlib.metadata.version(__package__)
    # e.g. when running from a source checkout that was not installed
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


__version__: str = get_version()


from crudclient.client import AsyncCrudClient, CrudClient  # noqa: E402
from crudclient.filter import Filter, encode_query  # noqa: E402
from crudclient.patch import (  # noqa: E402
    CreatedResource,
    PatchBody,
    PatchBulkBody,
    PatchBulkFilter,
    PatchBulkItem,
    UpsertBody,
    deserialize_bulk_filter,
    serialize_bulk_filter,
)

__all__ = [
    "AsyncCrudClient",
    "CreatedResource",
    "CrudClient",
    "Filter",
    "PatchBody",
    "PatchBulkBody",
    "PatchBulkFilter",
    "PatchBulkItem",
    "UpsertBody",
    "__version__",
    "deserialize_bulk_filter",
    "encode_query",
    "serialize_bulk_filter",
]

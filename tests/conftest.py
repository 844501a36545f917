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

"""
Main conftest for shared fixtures.
"""

from __future__ import annotations

from typing import AsyncIterator, Iterator

import pytest
from pytest_httpserver import HTTPServer

from crudclient import AsyncCrudClient, CrudClient

COLLECTION_PATH = "/books/"


@pytest.fixture
def collection_url(httpserver: HTTPServer) -> str:
    return httpserver.url_for(COLLECTION_PATH)


@pytest.fixture
def sync_client(collection_url: str) -> Iterator[CrudClient[dict]]:
    with CrudClient(collection_url, headers={"client-key": "abc"}) as client:
        yield client


@pytest.fixture
async def async_client(collection_url: str) -> AsyncIterator[AsyncCrudClient[dict]]:
    async with AsyncCrudClient(collection_url, headers={"client-key": "abc"}) as client:
        yield client

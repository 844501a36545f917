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
import pytest
from pytest_httpserver import HTTPServer

from crudclient import (
    AsyncCrudClient,
    CreatedResource,
    Filter,
    PatchBody,
    PatchBulkFilter,
    PatchBulkItem,
    UpsertBody,
)
from crudclient.exceptions import (
    CreateClientException,
    CrudHttpException,
    UnexpectedCrudResponseException,
)

COLLECTION_PATH = "/books/"
BOOK_1 = {"_id": "b1", "title": "Palomar", "author": "Calvino"}
BOOK_2 = {"_id": "b2", "title": "Marcovaldo", "author": "Calvino"}
CLIENT_HEADERS = {"client-key": "abc"}


class TestAsyncCrudClient:
    @pytest.mark.describe("test of AsyncCrudClient base URL validation")
    async def test_base_url_validation(self) -> None:
        with pytest.raises(CreateClientException):
            AsyncCrudClient("not-a-url")
        async with AsyncCrudClient("http://crud-service/books") as client:
            assert client.base_url == "http://crud-service/books/"

    @pytest.mark.describe("test of AsyncCrudClient options and conversions")
    async def test_client_options(self) -> None:
        client = AsyncCrudClient("http://crud-service/books/", headers={"h1": "v1"})
        client2 = client.with_options(headers={"h2": "v2"})
        assert client2.api_options.headers == {"h1": "v1", "h2": "v2"}
        assert client2 != client
        assert client.to_sync().to_async() == client
        assert "AsyncCrudClient" in repr(client)
        await client.aclose()
        await client2.aclose()

    @pytest.mark.describe("test of AsyncCrudClient reads")
    async def test_reads(
        self, httpserver: HTTPServer, async_client: AsyncCrudClient
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}b1",
            method="GET",
            headers=CLIENT_HEADERS,
            query_string={"_p": "title"},
        ).respond_with_json(BOOK_1)
        assert await async_client.get_by_id("b1", filter=Filter(projection=["title"])) == BOOK_1

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method="GET",
            query_string={"author": "Calvino", "_l": "2"},
        ).respond_with_json([BOOK_1, BOOK_2])
        assert await async_client.list(
            filter=Filter(fields={"author": "Calvino"}, limit=2)
        ) == [BOOK_1, BOOK_2]

        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}count", method="GET"
        ).respond_with_json(7)
        assert await async_client.count() == 7

        ndjson_body = "\n".join(json.dumps(doc) for doc in [BOOK_1, BOOK_2, BOOK_1])
        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}export", method="GET"
        ).respond_with_data(ndjson_body + "\n")
        assert await async_client.export() == [BOOK_1, BOOK_2, BOOK_1]

    @pytest.mark.describe("test of AsyncCrudClient writes")
    async def test_writes(
        self, httpserver: HTTPServer, async_client: AsyncCrudClient
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}b1",
            method="PATCH",
            json={"$set": {"title": "Palomar!"}},
        ).respond_with_json({**BOOK_1, "title": "Palomar!"})
        patched = await async_client.patch_by_id(
            "b1", PatchBody(set={"title": "Palomar!"})
        )
        assert patched["title"] == "Palomar!"

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method="PATCH",
            query_string={"_q": '{"year":1963}'},
            json={"$mul": {"price": 2}},
        ).respond_with_json(3)
        assert (
            await async_client.patch_many(
                PatchBody(mul={"price": 2}), filter=Filter(mongo_query={"year": 1963})
            )
            == 3
        )

        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}bulk",
            method="PATCH",
            json=[{"filter": {"field": "v-1"}, "update": {"$pull": {"tags": "x"}}}],
        ).respond_with_json(1)
        assert (
            await async_client.patch_bulk(
                [
                    PatchBulkItem(
                        filter=PatchBulkFilter(fields={"field": "v-1"}),
                        update=PatchBody(pull={"tags": "x"}),
                    )
                ]
            )
            == 1
        )

        httpserver.expect_oneshot_request(
            COLLECTION_PATH, method="POST", json={"title": "Palomar"}
        ).respond_with_json({"_id": "b1"})
        assert await async_client.create({"title": "Palomar"}) == "b1"

        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}bulk", method="POST", json=[{"title": "Palomar"}]
        ).respond_with_json([{"_id": "b1"}])
        assert await async_client.create_many([{"title": "Palomar"}]) == [
            CreatedResource(id="b1")
        ]

        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}upsert-one",
            method="POST",
            query_string={"isbn": "123"},
            json={"$setOnInsert": {"title": "Palomar"}},
        ).respond_with_json({"_id": "b9", "isbn": "123", "title": "Palomar"})
        assert await async_client.upsert_one(
            UpsertBody(set_on_insert={"title": "Palomar"}),
            filter=Filter(fields={"isbn": "123"}),
        ) == {"_id": "b9", "isbn": "123", "title": "Palomar"}

        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}b1", method="DELETE"
        ).respond_with_data("")
        assert await async_client.delete_by_id("b1") is None

        httpserver.expect_oneshot_request(
            COLLECTION_PATH, method="DELETE", query_string={"author": "Calvino"}
        ).respond_with_json("4")
        assert (
            await async_client.delete_many(filter=Filter(fields={"author": "Calvino"}))
            == 4
        )

    @pytest.mark.describe("test of AsyncCrudClient failures")
    async def test_failures(
        self, httpserver: HTTPServer, async_client: AsyncCrudClient
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}count", method="GET"
        ).respond_with_json(
            {"message": "Some message", "statusCode": 500, "error": "my error"},
            status=500,
        )
        with pytest.raises(CrudHttpException) as exc_info:
            await async_client.count()
        assert str(exc_info.value) == "Some message"
        assert exc_info.value.error_response.error == "my error"

        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}count", method="GET"
        ).respond_with_json(True)
        with pytest.raises(UnexpectedCrudResponseException):
            await async_client.count()

        httpserver.expect_oneshot_request(
            f"{COLLECTION_PATH}export", method="GET"
        ).respond_with_data('{"a": 1}\n{"a"')
        with pytest.raises(UnexpectedCrudResponseException):
            await async_client.export()

        httpserver.expect_oneshot_request("/-/healthz").respond_with_data(
            "down", status=503, content_type="text/plain"
        )
        with pytest.raises(CrudHttpException) as exc_info:
            await async_client.is_healthy()
        assert str(exc_info.value) == "down"

    @pytest.mark.describe("test of AsyncCrudClient transport errors")
    async def test_transport_errors(self) -> None:
        # nothing listens on this port
        async with AsyncCrudClient("http://127.0.0.1:9/books/") as client:
            with pytest.raises(httpx.TransportError):
                await client.count(timeout_ms=2000)

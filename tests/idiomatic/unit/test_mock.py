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

from typing import Any

import pytest

from crudclient import CreatedResource, Filter, PatchBody
from crudclient.exceptions import UnexpectedCrudResponseException
from crudclient.testing import MockCrudClient


class TestMockCrudClient:
    @pytest.mark.describe("test of MockCrudClient default results")
    def test_mock_defaults(self) -> None:
        mock: MockCrudClient[dict[str, Any]] = MockCrudClient()
        assert mock.get_by_id("x") is None
        assert mock.list() == []
        assert mock.count() == 0
        assert mock.export() == []
        assert mock.patch_many({"$set": {"a": 1}}) == 0
        assert mock.create({"a": 1}) == ""
        assert mock.create_many([{"a": 1}]) == []
        assert mock.delete_by_id("x") is None
        assert mock.is_healthy() is None

    @pytest.mark.describe("test of MockCrudClient configured results")
    def test_mock_results(self) -> None:
        mock: MockCrudClient[dict[str, Any]] = MockCrudClient(
            get_by_id_result={"_id": "b1"},
            count_result=12,
            create_many_result=[CreatedResource(id="b1")],
            delete_many_result=4,
        )
        assert mock.get_by_id("b1") == {"_id": "b1"}
        assert mock.count(filter=Filter(limit=3)) == 12
        assert mock.create_many([{}]) == [CreatedResource(id="b1")]
        assert mock.delete_many() == 4

    @pytest.mark.describe("test of MockCrudClient errors")
    def test_mock_errors(self) -> None:
        mock: MockCrudClient[dict[str, Any]] = MockCrudClient(
            count_result=12,
            count_error=UnexpectedCrudResponseException(
                text="boom", raw_response="?"
            ),
            is_healthy_error=RuntimeError("unhealthy"),
        )
        with pytest.raises(UnexpectedCrudResponseException):
            mock.count()
        with pytest.raises(RuntimeError):
            mock.is_healthy()

    @pytest.mark.describe("test of MockCrudClient assertion functions")
    def test_mock_assertion_funcs(self) -> None:
        calls: list[tuple[Any, ...]] = []

        def check_patch(id: str, body: Any, *, filter: Any, headers: Any) -> None:
            calls.append((id, body, filter, headers))

        def check_create(document: Any, *, headers: Any) -> None:
            assert document == {"title": "Palomar"}

        the_filter = Filter(fields={"author": "Calvino"})
        the_body = PatchBody(set={"title": "Palomar!"})
        mock: MockCrudClient[dict[str, Any]] = MockCrudClient(
            patch_by_id_result={"_id": "b1"},
            patch_by_id_assertion_func=check_patch,
            create_assertion_func=check_create,
        )
        assert mock.patch_by_id(
            "b1", the_body, filter=the_filter, headers={"h": "v"}
        ) == {"_id": "b1"}
        assert calls == [("b1", the_body, the_filter, {"h": "v"})]

        mock.create({"title": "Palomar"})
        with pytest.raises(AssertionError):
            mock.create({"title": "Marcovaldo"})

    @pytest.mark.describe("test of MockCrudClient assertion before error")
    def test_mock_assertion_then_error(self) -> None:
        seen: list[str] = []
        mock: MockCrudClient[dict[str, Any]] = MockCrudClient(
            delete_by_id_assertion_func=lambda id, headers: seen.append(id),
            delete_by_id_error=ValueError("nope"),
        )
        with pytest.raises(ValueError):
            mock.delete_by_id("b7")
        assert seen == ["b7"]

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

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Mapping

from crudclient.constants import DOC
from crudclient.filter import Filter
from crudclient.patch import CreatedResource, PatchBody, PatchBulkItem, UpsertBody


@dataclass
class MockCrudClient(Generic[DOC]):
    """
    An in-memory stand-in for CrudClient, for the tests of code that uses one.

    No request is ever sent. For each method, the corresponding attributes set:
      - `<method>_assertion_func`: if provided, it is called with the
        arguments the method received (the positional ones positionally, then
        `filter` and `headers` as keyword arguments where the method has them),
        so that a test can check them;
      - `<method>_error`: if provided, it is raised by the method;
      - `<method>_result`: otherwise, the value returned by the method.

    Example:
        >>> from crudclient import Filter
        >>> from crudclient.testing import MockCrudClient
        >>> def check_filter(*, filter, headers):
        ...     assert filter.limit == 5
        ...
        >>> books = MockCrudClient(count_result=3, count_assertion_func=check_filter)
        >>> books.count(filter=Filter(limit=5))
        3
    """

    get_by_id_result: DOC | None = None
    get_by_id_error: BaseException | None = None
    get_by_id_assertion_func: Callable[..., None] | None = None

    list_result: list[DOC] = field(default_factory=list)
    list_error: BaseException | None = None
    list_assertion_func: Callable[..., None] | None = None

    count_result: int = 0
    count_error: BaseException | None = None
    count_assertion_func: Callable[..., None] | None = None

    export_result: list[DOC] = field(default_factory=list)
    export_error: BaseException | None = None
    export_assertion_func: Callable[..., None] | None = None

    patch_by_id_result: DOC | None = None
    patch_by_id_error: BaseException | None = None
    patch_by_id_assertion_func: Callable[..., None] | None = None

    patch_many_result: int = 0
    patch_many_error: BaseException | None = None
    patch_many_assertion_func: Callable[..., None] | None = None

    patch_bulk_result: int = 0
    patch_bulk_error: BaseException | None = None
    patch_bulk_assertion_func: Callable[..., None] | None = None

    create_result: str = ""
    create_error: BaseException | None = None
    create_assertion_func: Callable[..., None] | None = None

    create_many_result: list[CreatedResource] = field(default_factory=list)
    create_many_error: BaseException | None = None
    create_many_assertion_func: Callable[..., None] | None = None

    delete_by_id_error: BaseException | None = None
    delete_by_id_assertion_func: Callable[..., None] | None = None

    delete_many_result: int = 0
    delete_many_error: BaseException | None = None
    delete_many_assertion_func: Callable[..., None] | None = None

    upsert_one_result: DOC | None = None
    upsert_one_error: BaseException | None = None
    upsert_one_assertion_func: Callable[..., None] | None = None

    is_healthy_error: BaseException | None = None

    @staticmethod
    def _check(
        assertion_func: Callable[..., None] | None,
        error: BaseException | None,
        *pargs: Any,
        **kwargs: Any,
    ) -> None:
        if assertion_func is not None:
            assertion_func(*pargs, **kwargs)
        if error is not None:
            raise error

    def get_by_id(
        self,
        id: str,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        self._check(
            self.get_by_id_assertion_func,
            self.get_by_id_error,
            id,
            filter=filter,
            headers=headers,
        )
        return self.get_by_id_result

    def list(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> list[DOC]:
        self._check(
            self.list_assertion_func,
            self.list_error,
            filter=filter,
            headers=headers,
        )
        return self.list_result

    def count(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        self._check(
            self.count_assertion_func,
            self.count_error,
            filter=filter,
            headers=headers,
        )
        return self.count_result

    def export(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> list[DOC]:
        self._check(
            self.export_assertion_func,
            self.export_error,
            filter=filter,
            headers=headers,
        )
        return self.export_result

    def patch_by_id(
        self,
        id: str,
        body: PatchBody | Mapping[str, Any],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        self._check(
            self.patch_by_id_assertion_func,
            self.patch_by_id_error,
            id,
            body,
            filter=filter,
            headers=headers,
        )
        return self.patch_by_id_result

    def patch_many(
        self,
        body: PatchBody | Mapping[str, Any],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        self._check(
            self.patch_many_assertion_func,
            self.patch_many_error,
            body,
            filter=filter,
            headers=headers,
        )
        return self.patch_many_result

    def patch_bulk(
        self,
        items: Iterable[PatchBulkItem | Mapping[str, Any]],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        self._check(
            self.patch_bulk_assertion_func,
            self.patch_bulk_error,
            items,
            filter=filter,
            headers=headers,
        )
        return self.patch_bulk_result

    def create(
        self,
        document: DOC,
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> str:
        self._check(
            self.create_assertion_func,
            self.create_error,
            document,
            headers=headers,
        )
        return self.create_result

    def create_many(
        self,
        documents: Iterable[DOC],
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> list[CreatedResource]:
        self._check(
            self.create_many_assertion_func,
            self.create_many_error,
            documents,
            headers=headers,
        )
        return self.create_many_result

    def delete_by_id(
        self,
        id: str,
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        self._check(
            self.delete_by_id_assertion_func,
            self.delete_by_id_error,
            id,
            headers=headers,
        )

    def delete_many(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        self._check(
            self.delete_many_assertion_func,
            self.delete_many_error,
            filter=filter,
            headers=headers,
        )
        return self.delete_many_result

    def upsert_one(
        self,
        body: UpsertBody | Mapping[str, Any],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        self._check(
            self.upsert_one_assertion_func,
            self.upsert_one_error,
            body,
            filter=filter,
            headers=headers,
        )
        return self.upsert_one_result

    def is_healthy(
        self,
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        self._check(None, self.is_healthy_error)

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

import logging
from types import TracebackType
from typing import Any, Generic, Iterable, Mapping, cast
from urllib.parse import urlsplit

from crudclient.constants import (
    DOC,
    DefaultDocumentType,
    DocumentDecoderType,
    DocumentEncoderType,
)
from crudclient.exceptions import (
    CreateClientException,
    UnexpectedCrudResponseException,
)
from crudclient.filter import Filter, encode_query
from crudclient.patch import CreatedResource, PatchBody, PatchBulkItem, UpsertBody
from crudclient.settings.defaults import (
    ALLOWED_URL_SCHEMES,
    BULK_PATH,
    COUNT_PATH,
    EXPORT_PATH,
    HEALTHZ_PATH,
    UPSERT_ONE_PATH,
)
from crudclient.utils.api_commander import APICommander, quote_path_segment
from crudclient.utils.api_options import APIOptions, FullAPIOptions, defaultAPIOptions
from crudclient.utils.ndjson import decode_json_values
from crudclient.utils.request_tools import HttpMethod
from crudclient.utils.unset import _UNSET, UnsetType

logger = logging.getLogger(__name__)


def _normalize_base_url(base_url: str) -> str:
    try:
        split_url = urlsplit(base_url)
    except ValueError as exc:
        raise CreateClientException(
            f"Invalid base URL: {exc}", base_url=base_url
        ) from exc
    if split_url.scheme not in ALLOWED_URL_SCHEMES or not split_url.netloc:
        raise CreateClientException(
            "The base URL must be an absolute http(s) URL, "
            f"such as 'http://crud-service/books/'. Got: '{base_url}'.",
            base_url=base_url,
        )
    if not split_url.path.endswith("/"):
        return split_url._replace(path=f"{split_url.path}/").geturl()
    return base_url


def _final_api_options(
    base_options: FullAPIOptions,
    headers: dict[str, str | None] | UnsetType,
    api_options: APIOptions | None,
) -> FullAPIOptions:
    arg_api_options = APIOptions(headers=headers)
    return base_options.with_override(api_options).with_override(arg_api_options)


def _body_to_dict(body: PatchBody | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(body, PatchBody):
        return body.to_dict()
    return dict(body)


def _bulk_item_to_dict(item: PatchBulkItem | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(item, PatchBulkItem):
        return item.to_dict()
    return dict(item)


def _parse_count(raw_count: Any, operation: str) -> int:
    # the service may reply with a bare number or with a string such as "42"
    if isinstance(raw_count, int) and not isinstance(raw_count, bool):
        return raw_count
    if isinstance(raw_count, str):
        try:
            return int(raw_count)
        except ValueError:
            pass
    raise UnexpectedCrudResponseException(
        text=f"Faulty response from {operation}: a count was expected.",
        raw_response=raw_count,
    )


def _parse_created_id(raw_response: Any) -> str:
    if isinstance(raw_response, dict) and isinstance(raw_response.get("_id"), str):
        return cast(str, raw_response["_id"])
    raise UnexpectedCrudResponseException(
        text="Faulty response from create: no string '_id' returned.",
        raw_response=raw_response,
    )


def _parse_created_resources(raw_response: Any) -> list[CreatedResource]:
    if isinstance(raw_response, list) and all(
        isinstance(item, dict) and isinstance(item.get("_id"), str)
        for item in raw_response
    ):
        return [CreatedResource.from_dict(item) for item in raw_response]
    raise UnexpectedCrudResponseException(
        text="Faulty response from create_many: a list of '_id' was expected.",
        raw_response=raw_response,
    )


class _DocumentCodec(Generic[DOC]):
    """Conversion between wire dictionaries and the documents of a client."""

    def __init__(
        self,
        decoder: DocumentDecoderType | None,
        encoder: DocumentEncoderType | None,
    ) -> None:
        self.decoder = decoder
        self.encoder = encoder

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, _DocumentCodec):
            return self.decoder == other.decoder and self.encoder == other.encoder
        else:
            return False

    def decode(self, raw_document: Any, operation: str) -> DOC:
        if not isinstance(raw_document, dict):
            raise UnexpectedCrudResponseException(
                text=f"Faulty response from {operation}: a document was expected.",
                raw_response=raw_document,
            )
        if self.decoder is None:
            return cast(DOC, raw_document)
        return cast(DOC, self.decoder(raw_document))

    def decode_many(self, raw_documents: Any, operation: str) -> list[DOC]:
        if not isinstance(raw_documents, list):
            raise UnexpectedCrudResponseException(
                text=f"Faulty response from {operation}: a list was expected.",
                raw_response=raw_documents,
            )
        return [self.decode(raw_document, operation) for raw_document in raw_documents]

    def encode(self, document: DOC) -> Any:
        if self.encoder is None:
            return document
        return self.encoder(document)


class CrudClient(Generic[DOC]):
    """
    A client for one collection exposed by a CRUD service.
    This class has a synchronous interface.

    Documents are exchanged as plain dictionaries unless a `document_decoder`
    (and, for writes, a `document_encoder`) is provided, in which case the
    methods return and accept instances of the document type.

    Args:
        base_url: the absolute http(s) URL of the collection, such as
            "http://crud-service/books/". A trailing slash is added if missing.
        document_type: this parameter acts a formal specifier for the type
            checker. If omitted, the resulting instance is implicitly
            a `CrudClient[dict[str, Any]]`.
        document_decoder: a callable turning each dictionary received from the
            service into a document. Defaults to returning the dictionary itself.
        document_encoder: a callable turning each document into the dictionary
            sent to the service. Defaults to sending the document as is.
        headers: additional headers sent with each request (shorthand for the
            same setting in `api_options`).
        api_options: a specification, complete or partial, of the API Options
            to override the defaults.

    Example:
        >>> from crudclient import CrudClient, Filter
        >>> books = CrudClient("http://crud-service/books/")
        >>> books.count(filter=Filter(fields={"author": "Calvino"}))
        12
        >>> books.list(filter=Filter(limit=1, projection=["title"]))
        [{'_id': '65f1...', 'title': 'Le cosmicomiche'}]

    Note:
        creating an instance does not send any request to the service.
    """

    def __init__(
        self,
        base_url: str,
        *,
        document_type: type[Any] = DefaultDocumentType,
        document_decoder: DocumentDecoderType | None = None,
        document_encoder: DocumentEncoderType | None = None,
        headers: dict[str, str | None] | UnsetType = _UNSET,
        api_options: APIOptions | None = None,
    ) -> None:
        self.base_url = _normalize_base_url(base_url)
        self.api_options = _final_api_options(defaultAPIOptions, headers, api_options)
        self._document_type = document_type
        self._codec: _DocumentCodec[DOC] = _DocumentCodec(
            document_decoder, document_encoder
        )
        self._api_commander = self._get_api_commander()

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}(base_url="{self.base_url}", '
            f"api_options={self.api_options})"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, CrudClient):
            return all(
                [
                    self.base_url == other.base_url,
                    self.api_options == other.api_options,
                    self._codec == other._codec,
                ]
            )
        else:
            return False

    def __enter__(self: CrudClient[DOC]) -> CrudClient[DOC]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        self._api_commander.close()

    def _get_api_commander(self) -> APICommander:
        """Instantiate a new APICommander based on the properties of this class."""

        return APICommander(
            base_url=self.base_url,
            headers=self.api_options.headers,
            redacted_header_names=self.api_options.redacted_header_names,
        )

    def _timeout_ms(self, timeout_ms: int | None) -> int:
        if timeout_ms is not None:
            return timeout_ms
        return self.api_options.timeout_options.request_timeout_ms

    def with_options(
        self: CrudClient[DOC],
        *,
        headers: dict[str, str | None] | UnsetType = _UNSET,
        api_options: APIOptions | None = None,
    ) -> CrudClient[DOC]:
        """
        Create a clone of this client with some changed attributes.

        Args:
            headers: additional headers, merged with (and taking precedence
                over) the ones already configured. A None value suppresses
                a header.
            api_options: any additional options to set for the clone, in the form
                of an APIOptions instance (where one can set just the needed
                attributes). In case the same setting is also provided as named
                parameter, the latter takes precedence.

        Returns:
            a new CrudClient instance.

        Example:
            >>> tenant_books = books.with_options(headers={"x-tenant": "acme"})
        """

        return CrudClient(
            self.base_url,
            document_type=self._document_type,
            document_decoder=self._codec.decoder,
            document_encoder=self._codec.encoder,
            api_options=_final_api_options(self.api_options, headers, api_options),
        )

    def to_async(
        self: CrudClient[DOC],
        *,
        headers: dict[str, str | None] | UnsetType = _UNSET,
        api_options: APIOptions | None = None,
    ) -> AsyncCrudClient[DOC]:
        """
        Create an AsyncCrudClient from this one. Save for the arguments
        explicitly provided as overrides, everything else is kept identical.

        Args:
            headers: additional headers, as for `with_options`.
            api_options: any additional options to set for the result.

        Returns:
            the new copy, an AsyncCrudClient instance.

        Example:
            >>> asyncio.run(books.to_async().count())
            12
        """

        return AsyncCrudClient(
            self.base_url,
            document_type=self._document_type,
            document_decoder=self._codec.decoder,
            document_encoder=self._codec.encoder,
            api_options=_final_api_options(self.api_options, headers, api_options),
        )

    def get_by_id(
        self,
        id: str,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> DOC:
        """
        Retrieve a single document by its ID.

        Args:
            id: the "_id" of the document.
            filter: an optional Filter further restricting the match
                (e.g. on a state field) or shaping the result (projection).
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.
                If not provided, this object's defaults apply.

        Returns:
            the document.

        Raises:
            CrudHttpException: e.g. with status code 404 if no document matches.

        Example:
            >>> books.get_by_id("65f1...", filter=Filter(projection=["title"]))
            {'_id': '65f1...', 'title': 'Marcovaldo'}
        """

        logger.info(f"get_by_id on '{self.base_url}'")
        raw_document = self._api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=quote_path_segment(id),
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished get_by_id on '{self.base_url}'")
        return self._codec.decode(raw_document, "get_by_id")

    def list(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> list[DOC]:
        """
        Retrieve the documents matching a filter.

        Args:
            filter: a Filter selecting and shaping the documents, including
                `limit`, `skip` and `sort` for pagination.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.

        Returns:
            the list of documents, in the order returned by the service.
        """

        logger.info(f"list on '{self.base_url}'")
        raw_documents = self._api_commander.request(
            http_method=HttpMethod.GET,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished list on '{self.base_url}'")
        return self._codec.decode_many(raw_documents, "list")

    def count(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        """
        Count the documents matching a filter.

        Args:
            filter: a Filter selecting the documents to count.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.

        Returns:
            the number of matching documents.

        Raises:
            UnexpectedCrudResponseException: if the service does not reply
                with an integer.
        """

        logger.info(f"count on '{self.base_url}'")
        raw_count = self._api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=COUNT_PATH,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished count on '{self.base_url}'")
        return _parse_count(raw_count, "count")

    def export(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> list[DOC]:
        """
        Retrieve all documents matching a filter through the export endpoint,
        which streams them as newline-delimited JSON instead of a JSON array.

        Args:
            filter: a Filter selecting and shaping the documents.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the whole HTTP request.

        Returns:
            the list of documents, in stream order.

        Raises:
            UnexpectedCrudResponseException: if an item in the stream is
                truncated or not valid JSON.
        """

        logger.info(f"export on '{self.base_url}'")
        raw_response = self._api_commander.raw_request(
            http_method=HttpMethod.GET,
            additional_path=EXPORT_PATH,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished export on '{self.base_url}'")
        return self._codec.decode_many(decode_json_values(raw_response.text), "export")

    def patch_by_id(
        self,
        id: str,
        body: PatchBody | Mapping[str, Any],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> DOC:
        """
        Apply an update to a single document, identified by its ID.

        Args:
            id: the "_id" of the document.
            body: a PatchBody (or its wire form as a dictionary).
            filter: an optional Filter further restricting the match.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.

        Returns:
            the document after the update.

        Example:
            >>> books.patch_by_id("65f1...", PatchBody(inc={"reprints": 1}))
            {'_id': '65f1...', 'title': 'Marcovaldo', 'reprints': 4}
        """

        logger.info(f"patch_by_id on '{self.base_url}'")
        raw_document = self._api_commander.request(
            http_method=HttpMethod.PATCH,
            payload=_body_to_dict(body),
            additional_path=quote_path_segment(id),
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished patch_by_id on '{self.base_url}'")
        return self._codec.decode(raw_document, "patch_by_id")

    def patch_many(
        self,
        body: PatchBody | Mapping[str, Any],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        """
        Apply the same update to all documents matching a filter.

        Args:
            body: a PatchBody (or its wire form as a dictionary).
            filter: a Filter selecting the documents to update.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.

        Returns:
            the number of updated documents.
        """

        logger.info(f"patch_many on '{self.base_url}'")
        raw_count = self._api_commander.request(
            http_method=HttpMethod.PATCH,
            payload=_body_to_dict(body),
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished patch_many on '{self.base_url}'")
        return _parse_count(raw_count, "patch_many")

    def patch_bulk(
        self,
        items: Iterable[PatchBulkItem | Mapping[str, Any]],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        """
        Apply, in one request, a distinct update to each of several subsets
        of documents.

        Args:
            items: the PatchBulkItem entries, each a filter plus an update.
            filter: a Filter sent as query parameters along with the items.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.

        Returns:
            the number of updated documents.

        Example:
            >>> books.patch_bulk([
            ...     PatchBulkItem(
            ...         filter=PatchBulkFilter(fields={"author": "Calvino"}),
            ...         update=PatchBody(set={"language": "it"}),
            ...     ),
            ... ])
            12
        """

        logger.info(f"patch_bulk on '{self.base_url}'")
        raw_count = self._api_commander.request(
            http_method=HttpMethod.PATCH,
            payload=[_bulk_item_to_dict(item) for item in items],
            additional_path=BULK_PATH,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished patch_bulk on '{self.base_url}'")
        return _parse_count(raw_count, "patch_bulk")

    def create(
        self,
        document: DOC,
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> str:
        """
        Insert a single document.

        Args:
            document: the document to insert.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.

        Returns:
            the "_id" assigned to the new document.
        """

        logger.info(f"create on '{self.base_url}'")
        raw_response = self._api_commander.request(
            http_method=HttpMethod.POST,
            payload=self._codec.encode(document),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished create on '{self.base_url}'")
        return _parse_created_id(raw_response)

    def create_many(
        self,
        documents: Iterable[DOC],
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> list[CreatedResource]:
        """
        Insert several documents in one request.

        Args:
            documents: the documents to insert.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.

        Returns:
            a list of CreatedResource, one per inserted document, in order.
        """

        logger.info(f"create_many on '{self.base_url}'")
        raw_response = self._api_commander.request(
            http_method=HttpMethod.POST,
            payload=[self._codec.encode(document) for document in documents],
            additional_path=BULK_PATH,
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished create_many on '{self.base_url}'")
        return _parse_created_resources(raw_response)

    def delete_by_id(
        self,
        id: str,
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Delete a single document by its ID.

        Args:
            id: the "_id" of the document.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.
        """

        logger.info(f"delete_by_id on '{self.base_url}'")
        self._api_commander.raw_request(
            http_method=HttpMethod.DELETE,
            additional_path=quote_path_segment(id),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished delete_by_id on '{self.base_url}'")

    def delete_many(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        """
        Delete all documents matching a filter.

        Args:
            filter: a Filter selecting the documents to delete. Caution: an
                empty filter targets the whole collection.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.

        Returns:
            the number of deleted documents.
        """

        logger.info(f"delete_many on '{self.base_url}'")
        raw_count = self._api_commander.request(
            http_method=HttpMethod.DELETE,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished delete_many on '{self.base_url}'")
        return _parse_count(raw_count, "delete_many")

    def upsert_one(
        self,
        body: UpsertBody | Mapping[str, Any],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> DOC:
        """
        Update the document matching a filter, or create it if none matches.

        Args:
            body: an UpsertBody (or its wire form as a dictionary).
            filter: a Filter selecting the document.
            headers: additional headers for this request only.
            timeout_ms: a timeout, in milliseconds, for the HTTP request.

        Returns:
            the document after the update or creation.

        Example:
            >>> books.upsert_one(
            ...     UpsertBody(
            ...         set={"price": 12},
            ...         set_on_insert={"title": "Palomar"},
            ...     ),
            ...     filter=Filter(fields={"isbn": "9788804668251"}),
            ... )
            {'_id': '65f2...', 'isbn': '9788804668251', 'title': 'Palomar', 'price': 12}
        """

        logger.info(f"upsert_one on '{self.base_url}'")
        raw_document = self._api_commander.request(
            http_method=HttpMethod.POST,
            payload=_body_to_dict(body),
            additional_path=UPSERT_ONE_PATH,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished upsert_one on '{self.base_url}'")
        return self._codec.decode(raw_document, "upsert_one")

    def is_healthy(
        self,
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Check the health endpoint ("/-/healthz") of the service hosting
        this collection.

        Raises:
            CrudHttpException: if the service reports itself as not healthy.
        """

        logger.info(f"is_healthy on '{self.base_url}'")
        self._api_commander.raw_request(
            http_method=HttpMethod.GET,
            additional_path=HEALTHZ_PATH,
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished is_healthy on '{self.base_url}'")


class AsyncCrudClient(Generic[DOC]):
    """
    A client for one collection exposed by a CRUD service.
    This class has an asynchronous interface for use with asyncio.

    The constructor arguments and the methods mirror those of `CrudClient`,
    whose docstrings provide the details: here every method that issues
    a request is a coroutine.

    Args:
        base_url: the absolute http(s) URL of the collection.
        document_type: a formal specifier for the type checker.
        document_decoder: a callable turning received dictionaries into documents.
        document_encoder: a callable turning documents into dictionaries to send.
        headers: additional headers sent with each request.
        api_options: a specification, complete or partial, of the API Options
            to override the defaults.

    Example:
        >>> from crudclient import AsyncCrudClient
        >>> async def count_books() -> int:
        ...     async with AsyncCrudClient("http://crud-service/books/") as books:
        ...         return await books.count()
        ...
        >>> asyncio.run(count_books())
        12
    """

    def __init__(
        self,
        base_url: str,
        *,
        document_type: type[Any] = DefaultDocumentType,
        document_decoder: DocumentDecoderType | None = None,
        document_encoder: DocumentEncoderType | None = None,
        headers: dict[str, str | None] | UnsetType = _UNSET,
        api_options: APIOptions | None = None,
    ) -> None:
        self.base_url = _normalize_base_url(base_url)
        self.api_options = _final_api_options(defaultAPIOptions, headers, api_options)
        self._document_type = document_type
        self._codec: _DocumentCodec[DOC] = _DocumentCodec(
            document_decoder, document_encoder
        )
        self._api_commander = self._get_api_commander()

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}(base_url="{self.base_url}", '
            f"api_options={self.api_options})"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, AsyncCrudClient):
            return all(
                [
                    self.base_url == other.base_url,
                    self.api_options == other.api_options,
                    self._codec == other._codec,
                ]
            )
        else:
            return False

    async def __aenter__(self: AsyncCrudClient[DOC]) -> AsyncCrudClient[DOC]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying HTTP connections."""
        await self._api_commander.aclose()

    def _get_api_commander(self) -> APICommander:
        """Instantiate a new APICommander based on the properties of this class."""

        return APICommander(
            base_url=self.base_url,
            headers=self.api_options.headers,
            redacted_header_names=self.api_options.redacted_header_names,
        )

    def _timeout_ms(self, timeout_ms: int | None) -> int:
        if timeout_ms is not None:
            return timeout_ms
        return self.api_options.timeout_options.request_timeout_ms

    def with_options(
        self: AsyncCrudClient[DOC],
        *,
        headers: dict[str, str | None] | UnsetType = _UNSET,
        api_options: APIOptions | None = None,
    ) -> AsyncCrudClient[DOC]:
        """
        Create a clone of this client with some changed attributes.
        See `CrudClient.with_options` for the meaning of the arguments.
        """

        return AsyncCrudClient(
            self.base_url,
            document_type=self._document_type,
            document_decoder=self._codec.decoder,
            document_encoder=self._codec.encoder,
            api_options=_final_api_options(self.api_options, headers, api_options),
        )

    def to_sync(
        self: AsyncCrudClient[DOC],
        *,
        headers: dict[str, str | None] | UnsetType = _UNSET,
        api_options: APIOptions | None = None,
    ) -> CrudClient[DOC]:
        """
        Create a CrudClient from this one. Save for the arguments
        explicitly provided as overrides, everything else is kept identical.

        Returns:
            the new copy, a CrudClient instance.
        """

        return CrudClient(
            self.base_url,
            document_type=self._document_type,
            document_decoder=self._codec.decoder,
            document_encoder=self._codec.encoder,
            api_options=_final_api_options(self.api_options, headers, api_options),
        )

    async def get_by_id(
        self,
        id: str,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> DOC:
        logger.info(f"get_by_id on '{self.base_url}'")
        raw_document = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=quote_path_segment(id),
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished get_by_id on '{self.base_url}'")
        return self._codec.decode(raw_document, "get_by_id")

    async def list(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> list[DOC]:
        logger.info(f"list on '{self.base_url}'")
        raw_documents = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished list on '{self.base_url}'")
        return self._codec.decode_many(raw_documents, "list")

    async def count(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        logger.info(f"count on '{self.base_url}'")
        raw_count = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=COUNT_PATH,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished count on '{self.base_url}'")
        return _parse_count(raw_count, "count")

    async def export(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> list[DOC]:
        logger.info(f"export on '{self.base_url}'")
        raw_response = await self._api_commander.async_raw_request(
            http_method=HttpMethod.GET,
            additional_path=EXPORT_PATH,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished export on '{self.base_url}'")
        return self._codec.decode_many(decode_json_values(raw_response.text), "export")

    async def patch_by_id(
        self,
        id: str,
        body: PatchBody | Mapping[str, Any],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> DOC:
        logger.info(f"patch_by_id on '{self.base_url}'")
        raw_document = await self._api_commander.async_request(
            http_method=HttpMethod.PATCH,
            payload=_body_to_dict(body),
            additional_path=quote_path_segment(id),
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished patch_by_id on '{self.base_url}'")
        return self._codec.decode(raw_document, "patch_by_id")

    async def patch_many(
        self,
        body: PatchBody | Mapping[str, Any],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        logger.info(f"patch_many on '{self.base_url}'")
        raw_count = await self._api_commander.async_request(
            http_method=HttpMethod.PATCH,
            payload=_body_to_dict(body),
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished patch_many on '{self.base_url}'")
        return _parse_count(raw_count, "patch_many")

    async def patch_bulk(
        self,
        items: Iterable[PatchBulkItem | Mapping[str, Any]],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        logger.info(f"patch_bulk on '{self.base_url}'")
        raw_count = await self._api_commander.async_request(
            http_method=HttpMethod.PATCH,
            payload=[_bulk_item_to_dict(item) for item in items],
            additional_path=BULK_PATH,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished patch_bulk on '{self.base_url}'")
        return _parse_count(raw_count, "patch_bulk")

    async def create(
        self,
        document: DOC,
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> str:
        logger.info(f"create on '{self.base_url}'")
        raw_response = await self._api_commander.async_request(
            http_method=HttpMethod.POST,
            payload=self._codec.encode(document),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished create on '{self.base_url}'")
        return _parse_created_id(raw_response)

    async def create_many(
        self,
        documents: Iterable[DOC],
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> list[CreatedResource]:
        logger.info(f"create_many on '{self.base_url}'")
        raw_response = await self._api_commander.async_request(
            http_method=HttpMethod.POST,
            payload=[self._codec.encode(document) for document in documents],
            additional_path=BULK_PATH,
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished create_many on '{self.base_url}'")
        return _parse_created_resources(raw_response)

    async def delete_by_id(
        self,
        id: str,
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        logger.info(f"delete_by_id on '{self.base_url}'")
        await self._api_commander.async_raw_request(
            http_method=HttpMethod.DELETE,
            additional_path=quote_path_segment(id),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished delete_by_id on '{self.base_url}'")

    async def delete_many(
        self,
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        logger.info(f"delete_many on '{self.base_url}'")
        raw_count = await self._api_commander.async_request(
            http_method=HttpMethod.DELETE,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished delete_many on '{self.base_url}'")
        return _parse_count(raw_count, "delete_many")

    async def upsert_one(
        self,
        body: UpsertBody | Mapping[str, Any],
        *,
        filter: Filter | None = None,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> DOC:
        logger.info(f"upsert_one on '{self.base_url}'")
        raw_document = await self._api_commander.async_request(
            http_method=HttpMethod.POST,
            payload=_body_to_dict(body),
            additional_path=UPSERT_ONE_PATH,
            query_string=encode_query(filter),
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished upsert_one on '{self.base_url}'")
        return self._codec.decode(raw_document, "upsert_one")

    async def is_healthy(
        self,
        *,
        headers: dict[str, str | None] | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        logger.info(f"is_healthy on '{self.base_url}'")
        await self._api_commander.async_raw_request(
            http_method=HttpMethod.GET,
            additional_path=HEALTHZ_PATH,
            headers=headers,
            timeout_ms=self._timeout_ms(timeout_ms),
        )
        logger.info(f"finished is_healthy on '{self.base_url}'")

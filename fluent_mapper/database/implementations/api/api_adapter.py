"""REST API adapter."""

import json
from typing import Any
from urllib.parse import quote

import httpx

from fluent_mapper.database.interfaces import DatabaseAdapter, QueryOptions
from fluent_mapper.exceptions import AdapterRequestError
from fluent_mapper.log import get_logger, log_statement
from fluent_mapper.types import DocumentData, SortDirection

logger = get_logger(__name__)

DEFAULT_ENDPOINTS = {
    "get": "/{collection}",
    "get_one": "/{collection}/{id}",
    "create": "/{collection}",
    "update": "/{collection}/{id}",
    "delete": "/{collection}/{id}",
}

DEFAULT_QUERY_PARAMS = {
    "filters": "filter",
    "limit": "limit",
    "offset": "offset",
    "sort": "sort",
    "fields": "fields",
}

LIST_KEYS = ("data", "results")


class APIAdapter(DatabaseAdapter):
    """Adapter speaking to a JSON REST API.

    Collections map onto URL templates. Filters travel as a single JSON
    query parameter shaped ``{field: {operator: value}}``; a raw predicate
    is sent verbatim in that parameter instead.
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        endpoints: dict[str, str] | None = None,
        query_params: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize API adapter.

        Args:
            base_url: API root; a trailing slash is dropped
            headers: Headers sent with every request
            timeout: Request timeout in seconds
            endpoints: Overrides for the get/get_one/create/update/delete
                URL templates
            query_params: Overrides for the filters/limit/offset/sort/fields
                query parameter names
            transport: Optional httpx transport
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self.timeout = timeout
        self.endpoints = {**DEFAULT_ENDPOINTS, **(endpoints or {})}
        self.query_params = {**DEFAULT_QUERY_PARAMS, **(query_params or {})}
        self._transport = transport

    def _build_url(self, template: str, **params: str) -> str:
        path = template
        for key, value in params.items():
            path = path.replace(f"{{{key}}}", quote(str(value), safe=""))
        return f"{self.base_url}{path}"

    def _build_query_params(self, options: QueryOptions) -> dict[str, str]:
        names = self.query_params
        params: dict[str, str] = {}

        if options.raw_where:
            params[names["filters"]] = options.raw_where
        elif options.filters:
            params[names["filters"]] = json.dumps(
                {f.field: {f.operator: f.value} for f in options.filters},
                default=str,
            )

        if options.limit is not None:
            params[names["limit"]] = str(options.limit)
        if options.offset is not None:
            params[names["offset"]] = str(options.offset)
        if options.sort_by is not None:
            prefix = "-" if options.sort_by.direction == SortDirection.DESC else ""
            params[names["sort"]] = f"{prefix}{options.sort_by.field}"
        if options.fields:
            params[names["fields"]] = ",".join(options.fields)

        return params

    async def _send(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        data: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        log_statement(f"{method} {url}", params, source="api")
        content = json.dumps(data, default=str) if data is not None else None
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    content=content,
                    headers={**self.headers, **(headers or {})},
                )
                response.raise_for_status()
        except httpx.RequestError as e:
            raise AdapterRequestError(f"Network error on {method} {url}: {e}") from e
        except httpx.HTTPStatusError as e:
            raise AdapterRequestError(
                f"API request failed: {e.response.status_code} {e.response.text}"
            ) from e

        if "application/json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text

    async def request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send an arbitrary request relative to the base URL.

        Args:
            method: HTTP method
            endpoint: Path appended to the base URL
            data: JSON body
            headers: Extra headers for this request

        Returns:
            Decoded JSON, or the response text for other content types
        """
        return await self._send(
            method.upper(), f"{self.base_url}{endpoint}", data=data, headers=headers
        )

    async def get(self, options: QueryOptions) -> list[DocumentData]:
        url = self._build_url(self.endpoints["get"], collection=options.collection_name)
        params = self._build_query_params(options)
        response = await self._send("GET", url, params=params)

        if isinstance(response, list):
            return response
        if isinstance(response, dict):
            for key in LIST_KEYS:
                if isinstance(response.get(key), list):
                    return response[key]
            return [response]
        raise AdapterRequestError(f"Unexpected response from {url}: {response!r}")

    async def add_document(self, collection_name: str, data: DocumentData) -> str:
        """Create a document and return the id reported by the API.

        Raises:
            AdapterRequestError: If the response carries no id
        """
        url = self._build_url(self.endpoints["create"], collection=collection_name)
        response = await self._send("POST", url, data=data)

        if isinstance(response, dict):
            nested = response.get("data")
            for candidate in (
                response.get("id"),
                response.get("_id"),
                nested.get("id") if isinstance(nested, dict) else None,
            ):
                if candidate is not None:
                    return str(candidate)
        raise AdapterRequestError(f"No id in create response from {url}")

    async def update_document(
        self, collection_name: str, doc_id: str, data: DocumentData
    ) -> None:
        url = self._build_url(
            self.endpoints["update"], collection=collection_name, id=doc_id
        )
        await self._send("PUT", url, data=data)

    async def delete_document(self, collection_name: str, doc_id: str) -> None:
        url = self._build_url(
            self.endpoints["delete"], collection=collection_name, id=doc_id
        )
        await self._send("DELETE", url)

    async def get_by_id(self, collection_name: str, doc_id: str) -> DocumentData:
        """Fetch one document through the get_one endpoint."""
        url = self._build_url(
            self.endpoints["get_one"], collection=collection_name, id=doc_id
        )
        response = await self._send("GET", url)
        if isinstance(response, dict) and isinstance(response.get("data"), dict):
            return response["data"]
        return response

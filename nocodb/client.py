"""Async NocoDB client: paginated video listing, full scans, single-record lookup and edits."""

from __future__ import annotations

import asyncio
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable
from urllib.parse import quote

import httpx
from cachetools import TTLCache
from pydantic import BaseModel, ValidationError

from config import NocoDBConfig
from nocodb.errors import NocoDBConfigError, NocoDBRequestError, NocoDBValidationError
from nocodb.models import PageInfo, RecordsResponse, Video, VideoListItem
from nocodb.mutations import build_update_payload

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25
FULL_SCAN_PAGE_SIZE = 50  # page size for fetch_all_videos with a field projection
FULL_SCAN_CONCURRENCY = 5
_MAX_ATTEMPTS = 3
_CACHE_SIZE = 512

_BRACKET_RE = re.compile(r'\[([^\]]+)\]')
_QUOTED_RE = re.compile(r'[\'"]([^\'"]+)[\'"]')
_NON_ALNUM_RE = re.compile(r'[^a-z0-9]', re.IGNORECASE)


@dataclass
class VideoPage:
    videos: list
    page_info: PageInfo


@runtime_checkable
class NocoDBClientProtocol(Protocol):
    async def fetch_videos(self, sort: Optional[str] = None, limit: Optional[int] = None,
                           page: Optional[int] = None, fields: Optional[list[str]] = None,
                           schema: type[BaseModel] = VideoListItem,
                           tag_search_query: Optional[str] = None) -> VideoPage: ...
    async def fetch_all_videos(self, sort: Optional[str] = None, fields: Optional[list[str]] = None,
                               schema: type[BaseModel] = VideoListItem,
                               tag_search_query: Optional[str] = None) -> list: ...
    async def fetch_video_by_video_id(self, video_id: str) -> Optional[Video]: ...
    async def update_video(self, video_id: str, data: dict) -> Optional[Video]: ...
    async def delete_video(self, video_id: str) -> bool: ...
    def clear_cache(self) -> None: ...
    async def close(self) -> None: ...


def build_tag_filter(query: Optional[str]) -> Optional[str]:
    """NocoDB ``where`` clause requiring every word of ``query`` in Hashtags."""
    if not query:
        return None
    words = query.split()
    if not words:
        return None
    return "~and".join(f"(Hashtags,ilike,%{word}%)" for word in words)


def _normalize_field_name(name: str) -> str:
    return _NON_ALNUM_RE.sub("", name).lower()


def extract_missing_fields(message: Any) -> list[str]:
    """Field names mentioned in a FIELD_NOT_FOUND error message.

    NocoDB names them either in a bracketed list or in quotes.
    """
    if not message or not isinstance(message, str):
        return []
    found: dict[str, None] = {}
    for group in _BRACKET_RE.findall(message):
        for name in group.split(","):
            name = name.strip().strip("'\"")
            if name:
                found[name] = None
    for name in _QUOTED_RE.findall(message):
        name = name.strip()
        if name:
            found[name] = None
    return list(found)


def drop_missing_fields(fields: list[str], missing: list[str]) -> list[str]:
    """Remove ``missing`` from ``fields``; if none of them matched, drop the projection entirely."""
    missing_norm = {_normalize_field_name(m) for m in missing}
    remaining = [f for f in fields if _normalize_field_name(f) not in missing_norm]
    if len(remaining) == len(fields):
        return []
    return remaining


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class NocoDBClient:
    """Reads and edits video rows in a NocoDB table over the v2 REST API."""

    def __init__(self, config: NocoDBConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=config.timeout,
            headers={"Content-Type": "application/json"},
        )
        self._cache: Optional[TTLCache] = (
            TTLCache(maxsize=_CACHE_SIZE, ttl=config.cache_ttl) if config.cache_ttl > 0 else None
        )
        self._table_id: Optional[str] = config.table_id or None

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------

    def _require_config(self) -> None:
        if not self.config.url:
            raise NocoDBConfigError("NocoDB URL is not configured. Set nocodb.url or NC_URL.")
        if not self.config.token:
            raise NocoDBConfigError("NocoDB auth token is not configured. Set nocodb.token or NC_TOKEN.")

    def _cache_get(self, key):
        if self._cache is None:
            return None
        return self._cache.get(key)

    def _cache_set(self, key, value) -> None:
        if self._cache is not None:
            self._cache[key] = value

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    async def _send(self, method: str, url: str, context: str, params: Optional[dict] = None,
                    json_body: Any = None) -> Any:
        """Issue one authenticated request and decode the JSON answer (None for an empty body)."""
        try:
            resp = await self._http.request(
                method, url, params=params, json=json_body,
                headers={"xc-token": self.config.token},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status != 404:
                logger.error("%s: request failed with HTTP %d", context, status)
            raise NocoDBRequestError(f"{context}: HTTP {status}", status, _response_body(e.response)) from e
        except httpx.HTTPError as e:
            logger.error("%s: request failed: %s", context, e)
            raise NocoDBRequestError(f"{context}: {e}") from e
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise NocoDBValidationError(f"{context}: response is not JSON") from e

    async def _get_json(self, url: str, params: dict, context: str) -> Any:
        return await self._send("GET", url, context, params=params)

    async def resolve_table_id(self) -> str:
        """The table id used in record URLs, looked up by table name when not configured."""
        if self._table_id:
            return self._table_id
        self._require_config()
        name = self.config.table_name
        if not name:
            raise NocoDBConfigError("Neither nocodb.table_id nor nocodb.table_name is configured.")
        if not self.config.project_id:
            self._table_id = name
            return name

        url = f"{self.config.url}/api/v2/meta/bases/{quote(self.config.project_id, safe='')}/tables"
        try:
            data = await self._get_json(url, {}, "resolve_table_id")
        except NocoDBRequestError as e:
            if e.status != 404:
                raise
            logger.info("Table metadata endpoint unavailable, using table name %r as id", name)
            self._table_id = name
            return name

        tables = data.get("list", []) if isinstance(data, dict) else data
        target = name.strip().lower()
        for meta in tables or []:
            if not isinstance(meta, dict):
                continue
            candidates = {str(meta.get(k, "")).strip().lower() for k in ("id", "title", "table_name", "slug")}
            if target in candidates and meta.get("id"):
                self._table_id = meta["id"]
                logger.info("Resolved table %r to id %s", name, self._table_id)
                return self._table_id

        logger.warning("Table %r not found in base metadata, using name as id", name)
        self._table_id = name
        return name

    def _records_url(self, table_id: str) -> str:
        return f"{self.config.url}/api/v2/tables/{quote(table_id, safe='')}/records"

    @staticmethod
    def _parse_page(data: Any, schema: type[BaseModel], context: str) -> VideoPage:
        try:
            envelope = RecordsResponse.model_validate(data)
            videos = [schema.model_validate(row) for row in envelope.rows]
        except ValidationError as e:
            raise NocoDBValidationError(
                f"Failed to parse NocoDB API response ({context}).",
                e.errors(include_url=False),
            ) from e
        return VideoPage(videos=videos, page_info=envelope.pageInfo)

    async def _lookup_video(self, video_id: str, context: str) -> Optional[Video]:
        """Uncached ``where=(VideoID,eq,...)`` lookup; None when the row is missing."""
        self._require_config()
        table_id = await self.resolve_table_id()
        params = {"where": f"(VideoID,eq,{video_id})", "limit": 1}
        try:
            data = await self._get_json(self._records_url(table_id), params, context)
        except NocoDBRequestError as e:
            if e.status == 404:
                return None
            raise
        page = self._parse_page(data, Video, context)
        return page.videos[0] if page.videos else None

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    async def fetch_videos(self, sort: Optional[str] = None, limit: Optional[int] = None,
                           page: Optional[int] = None, fields: Optional[list[str]] = None,
                           schema: type[BaseModel] = VideoListItem,
                           tag_search_query: Optional[str] = None) -> VideoPage:
        """Fetch one page of rows.

        When NocoDB rejects the field projection with FIELD_NOT_FOUND the
        missing columns are dropped and the request retried. Any other 404
        (typically an unknown table) is reported as an empty last page.
        """
        limit = limit or DEFAULT_PAGE_SIZE
        page = page or 1
        cache_key = ("page", sort, limit, page, tuple(fields or ()), tag_search_query, schema.__name__)
        cached = self._cache_get(cache_key)
        if cached is not None:
            return cached

        self._require_config()
        table_id = await self.resolve_table_id()
        url = self._records_url(table_id)
        context = f"fetch_videos(page={page}, limit={limit})"

        params: dict[str, Any] = {"limit": limit, "offset": (page - 1) * limit}
        if sort:
            params["sort"] = sort
        where = build_tag_filter(tag_search_query)
        if where:
            params["where"] = where

        remaining = list(fields or [])
        last_error: Optional[NocoDBRequestError] = None
        for _attempt in range(_MAX_ATTEMPTS):
            request_params = dict(params)
            if remaining:
                request_params["fields"] = ",".join(remaining)
            try:
                data = await self._get_json(url, request_params, context)
            except NocoDBRequestError as e:
                if e.status != 404:
                    raise
                last_error = e
                body = e.data if isinstance(e.data, dict) else {}
                if body.get("error") == "FIELD_NOT_FOUND" and remaining:
                    missing = extract_missing_fields(body.get("message") or body.get("msg"))
                    remaining = drop_missing_fields(remaining, missing)
                    logger.warning("%s: dropped missing fields %s, %d remaining",
                                   context, missing, len(remaining))
                    continue
                logger.info("%s: table returned 404, treating as empty", context)
                result = VideoPage(videos=[], page_info=PageInfo(
                    totalRows=0, page=page, pageSize=limit, isFirstPage=page == 1,
                    isLastPage=True, hasNextPage=False, hasPreviousPage=page > 1,
                ))
                self._cache_set(cache_key, result)
                return result

            result = self._parse_page(data, schema, context)
            logger.debug("%s: %d rows", context, len(result.videos))
            self._cache_set(cache_key, result)
            return result

        raise NocoDBRequestError(
            f"{context}: still failing after {_MAX_ATTEMPTS} attempts",
            last_error.status if last_error else None,
            last_error.data if last_error else None,
        )

    async def fetch_all_videos(self, sort: Optional[str] = None, fields: Optional[list[str]] = None,
                               schema: type[BaseModel] = VideoListItem,
                               tag_search_query: Optional[str] = None) -> list:
        """Fetch every row, requesting the remaining pages a few at a time."""
        cache_key = ("all", sort, tuple(fields or ()), tag_search_query, schema.__name__)
        cached = self._cache_get(cache_key)
        if cached is not None:
            return cached

        page_size = FULL_SCAN_PAGE_SIZE if fields else DEFAULT_PAGE_SIZE
        first = await self.fetch_videos(sort=sort, limit=page_size, page=1, fields=fields,
                                        schema=schema, tag_search_query=tag_search_query)
        videos = list(first.videos)
        total_pages = math.ceil(first.page_info.totalRows / page_size)
        pages = list(range(2, total_pages + 1))

        for i in range(0, len(pages), FULL_SCAN_CONCURRENCY):
            batch = pages[i:i + FULL_SCAN_CONCURRENCY]
            results = await asyncio.gather(*(
                self.fetch_videos(sort=sort, limit=page_size, page=p, fields=fields,
                                  schema=schema, tag_search_query=tag_search_query)
                for p in batch
            ))
            for r in results:
                videos.extend(r.videos)

        logger.info("Loaded %d videos across %d pages", len(videos), max(total_pages, 1))
        self._cache_set(cache_key, videos)
        return videos

    async def fetch_video_by_video_id(self, video_id: str) -> Optional[Video]:
        """Full record for a YouTube video id, or None if the table has no such row."""
        cache_key = ("video", video_id)
        cached = self._cache_get(cache_key)
        if cached is not None:
            return cached

        video = await self._lookup_video(video_id, f"fetch_video_by_video_id({video_id})")
        if video is not None:
            self._cache_set(cache_key, video)
        return video

    async def update_video(self, video_id: str, data: dict) -> Optional[Video]:
        """Write ``data`` to the row for ``video_id`` and return the reloaded record.

        Returns None when no such row exists. Every cached page is dropped
        after a successful write.
        """
        context = f"update_video({video_id})"
        current = await self._lookup_video(video_id, context)
        if current is None:
            return None

        payload = build_update_payload(data)
        table_id = await self.resolve_table_id()
        await self._send("PATCH", self._records_url(table_id), context,
                         json_body={**payload, "Id": current.Id})
        self.clear_cache()
        logger.info("%s: updated fields %s", context, sorted(payload))

        refreshed = await self._lookup_video(video_id, context)
        if refreshed is None:
            raise NocoDBRequestError(f"{context}: record could not be reloaded after update")
        self._cache_set(("video", video_id), refreshed)
        return refreshed

    async def delete_video(self, video_id: str) -> bool:
        """Delete the row for ``video_id``; False when no such row exists.

        The bulk endpoint (``DELETE records`` with an ``Id`` body) is tried
        first, then the per-record path.
        """
        context = f"delete_video({video_id})"
        current = await self._lookup_video(video_id, context)
        if current is None:
            return False

        table_id = await self.resolve_table_id()
        records_url = self._records_url(table_id)
        attempts = [
            ("bulk", records_url, {"Id": current.Id}),
            ("path", f"{records_url}/{current.Id}", None),
        ]
        last_error: Optional[NocoDBRequestError] = None
        for label, url, body in attempts:
            try:
                await self._send("DELETE", url, context, json_body=body)
            except NocoDBRequestError as e:
                logger.warning("%s: %s delete failed: %s", context, label, e)
                last_error = e
                continue
            self.clear_cache()
            logger.info("%s: deleted row %s (%s)", context, current.Id, label)
            return True
        raise last_error

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()

"""Video API routes: paginated listing, single record (read, edit, delete, export), facet options."""

import logging
import re

from fastapi import APIRouter, Request, Query
from fastapi.responses import JSONResponse, Response

from catalog.export import content_disposition, export_filename, video_to_markdown
from catalog.filters import collect_filter_options, deserialize_filters, filter_videos, serialize_filters
from catalog.pagination import PaginationParams, normalize_pagination, parse_int_param
from nocodb.models import VIDEO_LIST_FIELDS, VideoListItem
from web.deps import get_nocodb
from web.helpers import dump_video, error_response
from web.shared import API_RATE_LIMIT, limiter

logger = logging.getLogger(__name__)

VIDEO_ID_RE = re.compile(r'^[a-zA-Z0-9_-]{11}$')

DEFAULT_SORT = "-CreatedAt"

router = APIRouter()


def _invalid_id_response() -> JSONResponse:
    return JSONResponse({"error": "Invalid video id", "success": False}, status_code=400)


def _not_found_response() -> JSONResponse:
    return JSONResponse({"error": "Video not found", "success": False}, status_code=404)


@router.get("/api/videos")
@limiter.limit(API_RATE_LIMIT)
async def list_videos(
    request: Request,
    page: str = Query("", max_length=12),
    limit: str = Query("", max_length=12),
    sort: str = Query(DEFAULT_SORT, max_length=100),
    filters: str = Query("", max_length=4000),
):
    """One page of videos, optionally narrowed by a facet filter token."""
    # page/limit arrive as raw strings so junk degrades to defaults instead of a 422
    pagination = normalize_pagination(PaginationParams(
        page=parse_int_param(page),
        limit=parse_int_param(limit),
    ))
    client = get_nocodb(request)
    try:
        result = await client.fetch_videos(
            sort=sort or DEFAULT_SORT,
            limit=pagination.limit,
            page=pagination.page,
            fields=list(VIDEO_LIST_FIELDS),
            schema=VideoListItem,
        )
    except Exception as e:
        logger.error("Failed to fetch videos (page=%d, limit=%d): %s",
                     pagination.page, pagination.limit, e)
        return error_response("Failed to fetch videos", e)

    videos = filter_videos(result.videos, deserialize_filters(filters))
    page_info = result.page_info.model_dump(exclude_none=True)
    page_info["hasNextPage"] = not result.page_info.isLastPage
    return JSONResponse({
        "videos": [dump_video(v) for v in videos],
        "pageInfo": page_info,
        "success": True,
    })


@router.get("/api/videos/{video_id}")
@limiter.limit(API_RATE_LIMIT)
async def get_video(request: Request, video_id: str):
    """Full record for one video."""
    if not VIDEO_ID_RE.match(video_id):
        return _invalid_id_response()
    client = get_nocodb(request)
    try:
        video = await client.fetch_video_by_video_id(video_id)
    except Exception as e:
        logger.error("Failed to fetch video %s: %s", video_id, e)
        return error_response("Failed to fetch video", e)
    if video is None:
        return _not_found_response()
    return JSONResponse({"video": dump_video(video), "success": True})


@router.get("/api/filter-options")
@limiter.limit(API_RATE_LIMIT)
async def filter_options(request: Request, filters: str = Query("", max_length=4000)):
    """Facet values available across the catalog, narrowed by the active filters."""
    active = deserialize_filters(filters)
    client = get_nocodb(request)
    try:
        videos = await client.fetch_all_videos(
            sort=DEFAULT_SORT, fields=list(VIDEO_LIST_FIELDS), schema=VideoListItem,
        )
    except Exception as e:
        logger.error("Failed to load filter options: %s", e)
        return error_response("Failed to load filter options", e)

    matching = filter_videos(videos, active)
    return JSONResponse({
        "options": [o.to_dict() for o in collect_filter_options(matching)],
        "active": [o.to_dict() for o in active],
        "filters": serialize_filters(active),
        "total": len(matching),
        "success": True,
    })


@router.patch("/api/videos/{video_id}")
@limiter.limit(API_RATE_LIMIT)
async def update_video(request: Request, video_id: str):
    """Edit columns of one video, e.g. ``{"data": {"ImportanceRating": 4}}``."""
    if not VIDEO_ID_RE.match(video_id):
        return _invalid_id_response()
    try:
        body = await request.json()
    except ValueError:
        body = None
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, dict):
        return JSONResponse({"error": "Missing required field: data", "success": False}, status_code=400)

    client = get_nocodb(request)
    try:
        video = await client.update_video(video_id, data)
    except Exception as e:
        logger.error("Failed to update video %s: %s", video_id, e)
        return error_response("Failed to update video", e)
    if video is None:
        return _not_found_response()
    return JSONResponse({"video": dump_video(video), "success": True})


@router.delete("/api/videos/{video_id}")
@limiter.limit(API_RATE_LIMIT)
async def delete_video(request: Request, video_id: str):
    """Remove one video from the catalogue."""
    if not VIDEO_ID_RE.match(video_id):
        return _invalid_id_response()
    client = get_nocodb(request)
    try:
        deleted = await client.delete_video(video_id)
    except Exception as e:
        logger.error("Failed to delete video %s: %s", video_id, e)
        return error_response("Failed to delete video", e)
    if not deleted:
        return _not_found_response()
    return JSONResponse({"success": True, "message": "Video deleted successfully"})


@router.get("/api/videos/{video_id}/export")
@limiter.limit(API_RATE_LIMIT)
async def export_video(request: Request, video_id: str):
    """Download one video as a markdown file."""
    if not VIDEO_ID_RE.match(video_id):
        return _invalid_id_response()
    client = get_nocodb(request)
    try:
        video = await client.fetch_video_by_video_id(video_id)
    except Exception as e:
        logger.error("Failed to export video %s: %s", video_id, e)
        return error_response("Failed to export video", e)
    if video is None:
        return _not_found_response()
    return Response(
        content=video_to_markdown(video),
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": content_disposition(export_filename(video))},
    )

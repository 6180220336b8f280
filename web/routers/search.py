"""Search route: free-text and facet search over the whole catalog."""

import logging

from fastapi import APIRouter, Request, Query
from fastapi.responses import JSONResponse

from catalog.filters import deserialize_filters, filter_videos, serialize_filters
from catalog.pagination import PaginationParams, normalize_pagination, parse_int_param
from catalog.search import SEARCHABLE_FIELDS, search_videos, sort_videos
from nocodb.models import VIDEO_LIST_FIELDS, VideoListItem
from web.deps import get_nocodb
from web.helpers import dump_video, error_response, split_csv
from web.shared import API_RATE_LIMIT, limiter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/search")
@limiter.limit(API_RATE_LIMIT)
async def search(
    request: Request,
    q: str = Query("", max_length=200),
    categories: str = Query("", max_length=500),
    filters: str = Query("", max_length=4000),
    limit: str = Query("", max_length=12),
    offset: str = Query("", max_length=12),
    sort: str = Query("-CreatedAt", max_length=100),
):
    """Videos where every query term appears in one of the chosen categories."""
    category_list = split_csv(categories)
    active = deserialize_filters(filters)
    pagination = normalize_pagination(PaginationParams(
        limit=parse_int_param(limit),
        offset=parse_int_param(offset),
    ))

    if not q.strip() and not active:
        return JSONResponse({
            "videos": [],
            "total": 0,
            "success": True,
            "query": "",
            "categories": [],
            "filters": "",
            "availableCategories": list(SEARCHABLE_FIELDS),
        })

    client = get_nocodb(request)
    try:
        videos = await client.fetch_all_videos(
            sort=sort, fields=list(VIDEO_LIST_FIELDS), schema=VideoListItem,
        )
    except Exception as e:
        logger.error("Search failed for %r: %s", q, e)
        return error_response("Failed to search videos", e)

    if q.strip():
        videos = search_videos(videos, q, category_list)
    videos = filter_videos(videos, active)
    ordered = sort_videos(videos, sort)
    window = ordered[pagination.offset:pagination.offset + pagination.limit]
    logger.info("Search %r: %d matches (offset=%d, limit=%d)",
                q, len(ordered), pagination.offset, pagination.limit)

    return JSONResponse({
        "videos": [dump_video(v) for v in window],
        "total": len(ordered),
        "success": True,
        "query": q,
        "categories": category_list,
        "filters": serialize_filters(active),
        "availableCategories": list(SEARCHABLE_FIELDS),
    })

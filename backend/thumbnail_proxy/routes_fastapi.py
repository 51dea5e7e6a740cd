"""
Thumbnail Proxy API Routes

Provides endpoints for:
- Transforming remote images (GET /image/{spec}/{url})
- Cache statistics
- Health check
"""

import logging
from urllib.parse import unquote
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response, JSONResponse

from .errors import ThumbnailError
from .models import OutputFormat
from .pipeline import ThumbnailPipeline

logger = logging.getLogger(__name__)

# ============================================
# Router
# ============================================

router = APIRouter(tags=["Thumbnail Proxy"])


def get_pipeline(request: Request) -> ThumbnailPipeline:
    """The pipeline created at startup (see main.create_app)."""
    return request.app.state.pipeline


# ============================================
# Endpoints
# ============================================

@router.get("/image/stats")
async def get_cache_stats(pipeline: ThumbnailPipeline = Depends(get_pipeline)):
    """Get source cache statistics."""
    return JSONResponse(content={
        "success": True,
        "stats": pipeline.cache.stats(),
    })


@router.get("/image/{spec}/{url:path}")
async def generate(
    spec: str,
    url: str,
    format: OutputFormat = Query(OutputFormat.PNG, description="Output image format"),
    pipeline: ThumbnailPipeline = Depends(get_pipeline),
):
    """
    Fetch the image at `url`, apply the operations encoded in `spec`, return the result.

    Example:
        GET /image/eyJ2IjoxLCJzcGVjcyI6W119/https%3A%2F%2Fexample.com%2Fimage.jpg
    """
    # The ASGI server has already percent-decoded the path once; this second pass
    # also turns escapes inside the source URL (%2B, %20) into literal characters
    url = unquote(url)

    try:
        rendered = await pipeline.handle(spec, url, format)
    except ThumbnailError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return Response(
        content=rendered.data,
        media_type=rendered.content_type,
        headers={
            "X-Cache": "HIT" if rendered.cache_hit else "MISS",
            "Cache-Control": "public, max-age=86400",  # Browser cache 24h
        },
    )


@router.get("/health")
async def health_check(pipeline: ThumbnailPipeline = Depends(get_pipeline)):
    """Health check endpoint."""
    return JSONResponse(content={
        "status": "healthy",
        "service": "thumbnail-proxy",
        "cache_stats": pipeline.cache.stats(),
    })

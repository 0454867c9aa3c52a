from fastapi import APIRouter
from fastapi.responses import JSONResponse
import logging

from config import GITHUB_TOKEN, CACHE_TTL_SECONDS
from engine.pipeline import generate_report

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/report")
async def get_report():
    """Generate a fresh narrative report from live ecosystem data"""
    try:
        report = await generate_report(github_token=GITHUB_TOKEN)
    except Exception as e:
        logger.error("Failed to generate report: %s", e, exc_info=True)
        return JSONResponse({"error": "Failed to generate report"}, status_code=500)

    return JSONResponse(
        report,
        headers={"Cache-Control": f"public, max-age={CACHE_TTL_SECONDS}"},
    )

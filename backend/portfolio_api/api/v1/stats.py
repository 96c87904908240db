"""External statistics API (GitHub profile, cache-aside)."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.dependencies import get_db, get_github_client
from portfolio_api.integrations.github.client import GitHubClient
from portfolio_api.schemas.common import APIResponse
from portfolio_api.services import stats_service

router = APIRouter()


@router.get("/github", response_model=APIResponse)
@router.get("/external", response_model=APIResponse, include_in_schema=False)
async def github_stats(
    username: str | None = Query(None, min_length=1, max_length=39),
    client: GitHubClient = Depends(get_github_client),
    db: AsyncSession = Depends(get_db),
):
    result = await stats_service.get_github_stats(db, client, username)
    message = None
    if result.stale:
        message = f"Serving cached data ({result.age_seconds}s old): {result.reason}"
    return APIResponse(status="success", data=result.model_dump(), message=message)

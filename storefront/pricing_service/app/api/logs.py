"""Read-only access to the price change log."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from storefront.common import ServiceSettings

from ..dependencies import get_log_repository, get_settings
from ..errors import RepositoryUnavailable
from ..repository import PriceChangeLogRepository
from ..schemas import PriceChangeListResponse, PriceChangeResponse
from .adjustments import serialize_change
from .errors import to_http_exception

router = APIRouter(prefix="/pricing/logs", tags=["pricing-logs"])


@router.get("", response_model=PriceChangeListResponse)
async def list_recent_price_changes(
    limit: int | None = Query(default=None, ge=1, le=100),
    repository: PriceChangeLogRepository = Depends(get_log_repository),
    settings: ServiceSettings = Depends(get_settings),
) -> PriceChangeListResponse:
    try:
        entries = await repository.list_recent(limit or settings.recent_log_limit)
    except RepositoryUnavailable as exc:
        raise to_http_exception(exc) from exc
    return PriceChangeListResponse(
        items=[PriceChangeResponse.model_validate(serialize_change(entry)) for entry in entries]
    )

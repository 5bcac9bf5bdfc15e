"""Brand identifier endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from brandplot.adapters.rate_limit.base import RateLimitResult
from brandplot.core.auth import verify_api_key
from brandplot.core.rate_limit import enforce_rate_limit
from brandplot.schemas.brand import IdentifierRequest, IdentifierResponse
from brandplot.utils.identifiers import generate_id_unico

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Brand"])


@router.post(
    "/brand/identifier",
    response_model=IdentifierResponse,
    dependencies=[Depends(verify_api_key)],
)
async def create_identifier(
    body: IdentifierRequest,
    rate_limit: Annotated[RateLimitResult | None, Depends(enforce_rate_limit)],
) -> IdentifierResponse:
    """Derive the ``idUnico`` for a company name.

    This is the entry point of the onboarding flow, so each call counts
    against the client's rate limit.
    """
    id_unico = generate_id_unico(body.company_name)
    logger.info("brand.identifier_generated", extra={"id_unico": id_unico})
    return IdentifierResponse(
        id_unico=id_unico,
        remaining=rate_limit.remaining if rate_limit else None,
    )

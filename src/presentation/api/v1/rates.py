"""Rate configuration API endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query, status

from application.services.rate_config_service import RateConfigService
from domain.models.rate import ConsumerScope
from infrastructure.auth.rbac import require_admin
from infrastructure.container import get_rate_config_service

from .schemas import (
    EffectiveRateResponse,
    ErrorResponse,
    FlatRateUpdate,
    MessageResponse,
    RateEntryCreate,
    RateEntryResponse,
    RateEntryUpdate,
    TaxesSurchargesResponse,
)

router = APIRouter(prefix="/config", tags=["Rate Configuration"])

RateID = Annotated[uuid.UUID, Path(description="Rate entry identifier.")]
ConsumerTypePath = Annotated[ConsumerScope, Path(description="Consumer type.")]

_NOT_FOUND = {404: {"description": "Rate entry not found.", "model": ErrorResponse}}


def _admin_id(claims: dict[str, Any]) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(claims.get("sub")))
    except ValueError:
        return None


@router.post(
    "",
    response_model=RateEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a rate entry",
    responses={
        401: {"description": "Not authenticated.", "model": ErrorResponse},
        403: {"description": "Admin role required.", "model": ErrorResponse},
    },
)
def create_rate(
    body: RateEntryCreate,
    claims: dict[str, Any] = Depends(require_admin),
    service: RateConfigService = Depends(get_rate_config_service),
) -> RateEntryResponse:
    entry = service.create(body.to_domain(), admin_id=_admin_id(claims))
    return RateEntryResponse.from_domain(entry)


@router.get("", response_model=list[RateEntryResponse], summary="List rate entries")
def list_rates(
    active: bool = Query(False, description="Only entries active today."),
    service: RateConfigService = Depends(get_rate_config_service),
) -> list[RateEntryResponse]:
    entries = service.find_active() if active else service.list_all()
    return [RateEntryResponse.from_domain(e) for e in entries]


@router.get(
    "/effective",
    response_model=EffectiveRateResponse,
    summary="The flat rate used for bill calculation",
)
def get_effective_rate(
    service: RateConfigService = Depends(get_rate_config_service),
) -> EffectiveRateResponse:
    return EffectiveRateResponse.from_domain(service.get_effective_rate())


@router.post(
    "/flat-rate",
    response_model=RateEntryResponse,
    summary="Replace the flat rate",
    description="Deactivates every active entry, then creates a new active flat rate.",
)
def replace_flat_rate(
    body: FlatRateUpdate,
    claims: dict[str, Any] = Depends(require_admin),
    service: RateConfigService = Depends(get_rate_config_service),
) -> RateEntryResponse:
    entry = service.replace_flat_rate(
        unit_price=body.rate_per_unit,
        vat_percent=body.vat_percentage,
        fixed_surcharge=body.fixed_service_charge,
        admin_id=_admin_id(claims),
    )
    return RateEntryResponse.from_domain(entry)


@router.get(
    "/consumer-type/{consumer_type}",
    response_model=list[RateEntryResponse],
    summary="Active entries for a consumer type (including 'all')",
)
def list_by_consumer_type(
    consumer_type: ConsumerTypePath,
    service: RateConfigService = Depends(get_rate_config_service),
) -> list[RateEntryResponse]:
    return [RateEntryResponse.from_domain(e) for e in service.find_by_consumer_type(consumer_type)]


@router.get(
    "/tier-rates/{consumer_type}",
    response_model=list[RateEntryResponse],
    summary="Active tier rates for a consumer type",
)
def list_tier_rates(
    consumer_type: ConsumerTypePath,
    service: RateConfigService = Depends(get_rate_config_service),
) -> list[RateEntryResponse]:
    return [RateEntryResponse.from_domain(e) for e in service.get_tier_rates(consumer_type)]


@router.get(
    "/taxes-surcharges/{consumer_type}",
    response_model=TaxesSurchargesResponse,
    summary="Active taxes and surcharges for a consumer type",
)
def list_taxes_and_surcharges(
    consumer_type: ConsumerTypePath,
    service: RateConfigService = Depends(get_rate_config_service),
) -> TaxesSurchargesResponse:
    result = service.get_taxes_and_surcharges(consumer_type)
    return TaxesSurchargesResponse(
        taxes=[RateEntryResponse.from_domain(e) for e in result.taxes],
        surcharges=[RateEntryResponse.from_domain(e) for e in result.surcharges],
    )


@router.get(
    "/{rate_id}",
    response_model=RateEntryResponse,
    summary="Get a rate entry",
    responses=_NOT_FOUND,
)
def get_rate(
    rate_id: RateID,
    service: RateConfigService = Depends(get_rate_config_service),
) -> RateEntryResponse:
    return RateEntryResponse.from_domain(service.get(rate_id))


@router.patch(
    "/{rate_id}",
    response_model=RateEntryResponse,
    summary="Update a rate entry",
    dependencies=[Depends(require_admin)],
    responses=_NOT_FOUND,
)
def update_rate(
    rate_id: RateID,
    body: RateEntryUpdate,
    service: RateConfigService = Depends(get_rate_config_service),
) -> RateEntryResponse:
    return RateEntryResponse.from_domain(service.update(rate_id, **body.changes()))


@router.patch(
    "/{rate_id}/toggle",
    response_model=RateEntryResponse,
    summary="Flip a rate entry's active flag",
    dependencies=[Depends(require_admin)],
    responses=_NOT_FOUND,
)
def toggle_rate(
    rate_id: RateID,
    service: RateConfigService = Depends(get_rate_config_service),
) -> RateEntryResponse:
    return RateEntryResponse.from_domain(service.toggle_active(rate_id))


@router.delete(
    "/{rate_id}",
    response_model=MessageResponse,
    summary="Delete a rate entry",
    dependencies=[Depends(require_admin)],
    responses=_NOT_FOUND,
)
def delete_rate(
    rate_id: RateID,
    service: RateConfigService = Depends(get_rate_config_service),
) -> MessageResponse:
    service.remove(rate_id)
    return MessageResponse(message=f"Config {rate_id} deleted")

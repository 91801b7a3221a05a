"""Bill calculation and calculation-history API endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Response

from application.services.calculation_service import BillRequest, CalculationService
from application.services.history_service import HistoryRecorder
from infrastructure.auth.rbac import require_admin
from infrastructure.container import (
    get_app_settings,
    get_calculation_service,
    get_history_recorder,
)
from infrastructure.pdf.bill_renderer import BillBranding, render_bill_pdf
from infrastructure.settings import AppSettings

from .schemas import (
    BillBreakdownResponse,
    BillRecordResponse,
    CalculateBillRequest,
    ErrorResponse,
    HistoryPageResponse,
    MonthlyStatResponse,
)

router = APIRouter(prefix="/calculation", tags=["Calculation"])

RecordID = Annotated[uuid.UUID, Path(description="Bill record identifier.")]


def _to_request(body: CalculateBillRequest) -> BillRequest:
    return BillRequest(
        consumer_type=body.consumer_type,
        units_consumed=body.units_consumed,
        consumer_name=body.consumer_name,
        consumer_id=body.consumer_id,
        calculation_month=body.calculation_month,
    )


@router.post(
    "",
    response_model=BillBreakdownResponse,
    summary="Calculate an electricity bill",
    responses={422: {"description": "Validation error.", "model": ErrorResponse}},
)
def calculate_bill(
    body: CalculateBillRequest,
    service: CalculationService = Depends(get_calculation_service),
) -> BillBreakdownResponse:
    return BillBreakdownResponse.from_domain(service.calculate_bill(_to_request(body)))


@router.post(
    "/pdf",
    summary="Calculate a bill and download it as PDF",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}, "description": "PDF bill."}},
)
def calculate_bill_pdf(
    body: CalculateBillRequest,
    service: CalculationService = Depends(get_calculation_service),
    settings: AppSettings = Depends(get_app_settings),
) -> Response:
    breakdown = service.calculate_bill(_to_request(body))
    pdf = render_bill_pdf(
        breakdown,
        BillBranding(
            company_name=settings.company_name,
            tagline=settings.company_tagline,
            currency_label=settings.currency_label,
            support_email=settings.support_email,
        ),
    )
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=bill-{breakdown.calculation_month}.pdf"
        },
    )


@router.get(
    "/history",
    response_model=HistoryPageResponse,
    summary="List calculation history (newest first)",
    dependencies=[Depends(require_admin)],
    responses={
        401: {"description": "Not authenticated.", "model": ErrorResponse},
        403: {"description": "Admin role required.", "model": ErrorResponse},
    },
)
def list_history(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, description="Page size; capped by the server."),
    history: HistoryRecorder = Depends(get_history_recorder),
    settings: AppSettings = Depends(get_app_settings),
) -> HistoryPageResponse:
    result = history.list_page(page=page, limit=limit or settings.history_default_page_size)
    return HistoryPageResponse(
        data=[BillRecordResponse.from_domain(r) for r in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.get(
    "/history/consumer/{consumer_id}",
    response_model=list[BillRecordResponse],
    summary="List calculation history for one consumer",
)
def list_consumer_history(
    consumer_id: str,
    history: HistoryRecorder = Depends(get_history_recorder),
) -> list[BillRecordResponse]:
    return [BillRecordResponse.from_domain(r) for r in history.list_by_consumer(consumer_id)]


@router.get(
    "/history/{record_id}",
    response_model=BillRecordResponse,
    summary="Get one calculation history entry",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Record not found.", "model": ErrorResponse}},
)
def get_history_entry(
    record_id: RecordID,
    history: HistoryRecorder = Depends(get_history_recorder),
) -> BillRecordResponse:
    return BillRecordResponse.from_domain(history.get_by_id(record_id))


@router.get(
    "/stats/{month}",
    response_model=list[MonthlyStatResponse],
    summary="Monthly totals per consumer type",
    dependencies=[Depends(require_admin)],
    responses={422: {"description": "Month is not YYYY-MM.", "model": ErrorResponse}},
)
def monthly_stats(
    month: str,
    history: HistoryRecorder = Depends(get_history_recorder),
) -> list[MonthlyStatResponse]:
    return [MonthlyStatResponse.from_domain(a) for a in history.monthly_aggregate(month)]

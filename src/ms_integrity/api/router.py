"""Admin trigger for an on-demand integrity scan."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.ms_account.domain.models import Account
from src.ms_common.response import ApiResponse, success_response
from src.ms_gateway.auth.dependencies import require_admin
from src.ms_integrity.api.dependencies import get_checker
from src.ms_integrity.application.checker import ConsistencyChecker
from src.ms_integrity.application.schemas import IntegrityReportResponse

router = APIRouter(prefix="/admin/integrity", tags=["admin"])


@router.post("/scan")
async def scan(
    admin: Annotated[Account, Depends(require_admin)],
    checker: Annotated[ConsistencyChecker, Depends(get_checker)],
    request: Request,
    repair: bool | None = Query(None, description="Override INTEGRITY_REPAIR_ENABLED"),
) -> ApiResponse:
    report = await checker.scan(repair=repair)
    resp = success_response(IntegrityReportResponse.from_domain(report).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp

"""Response schema for an integrity scan."""

from pydantic import BaseModel

from src.ms_common.datetime_utils import iso_or_empty
from src.ms_integrity.domain.models import IntegrityReport, Violation


class ViolationResponse(BaseModel):
    kind: str
    entity_type: str
    entity_id: str
    account_id: str | None
    detail: str

    @classmethod
    def from_domain(cls, v: Violation) -> "ViolationResponse":
        return cls(
            kind=v.kind.value,
            entity_type=v.entity_type.value,
            entity_id=v.entity_id,
            account_id=v.account_id,
            detail=v.detail,
        )


class IntegrityReportResponse(BaseModel):
    ok: bool
    scanned_accounts: int
    scanned_products: int
    scanned_orders: int
    violations: list[ViolationResponse]
    repaired: list[ViolationResponse]
    started_at: str
    finished_at: str

    @classmethod
    def from_domain(cls, report: IntegrityReport) -> "IntegrityReportResponse":
        return cls(
            ok=report.ok,
            scanned_accounts=report.scanned_accounts,
            scanned_products=report.scanned_products,
            scanned_orders=report.scanned_orders,
            violations=[ViolationResponse.from_domain(v) for v in report.violations],
            repaired=[ViolationResponse.from_domain(v) for v in report.repaired],
            started_at=iso_or_empty(report.started_at),
            finished_at=iso_or_empty(report.finished_at),
        )

"""Consistency checker findings — pure dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime

from src.ms_common.enums import EntityType, ViolationKind


@dataclass(frozen=True)
class Violation:
    kind: ViolationKind
    entity_type: EntityType     # PRODUCT or ORDER
    entity_id: str
    account_id: str | None      # owning / referencing account
    detail: str = ""

    @property
    def key(self) -> tuple[str, str, str, str | None]:
        return (self.kind.value, self.entity_type.value, self.entity_id, self.account_id)


@dataclass
class IntegrityReport:
    started_at: datetime
    finished_at: datetime | None = None
    scanned_accounts: int = 0
    scanned_products: int = 0
    scanned_orders: int = 0
    violations: list[Violation] = field(default_factory=list)
    repaired: list[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def unrepaired(self) -> list[Violation]:
        fixed = {v.key for v in self.repaired}
        return [v for v in self.violations if v.key not in fixed]

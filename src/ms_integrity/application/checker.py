"""ConsistencyChecker — finds where account references and canonical records disagree.

Invariant checked (both directions):
  every id in account.listings / account.order_refs names an existing
  Product / Order whose owner is that account, exactly once; and every
  Product / Order appears in its owner's list.

Findings:
  ORPHAN     canonical record its owner does not reference
  DANGLING   reference to a record that is missing or owned by someone else
  DUPLICATE  same id referenced more than once by one account

Default is report-only. Repair mode re-reads each affected account, attaches
orphans that still exist under the same owner when re-read, strips
dangling references, drops duplicates and saves with the optimistic
version check. Orphans whose owner account no longer exists are
reported and left alone. Never called from request handlers.
"""

import logging
from collections import Counter, defaultdict

from config.settings import settings
from src.ms_account.domain.models import Account
from src.ms_account.domain.repository import AccountRepositoryProtocol
from src.ms_common.datetime_utils import utc_now
from src.ms_common.enums import EntityType, ViolationKind
from src.ms_common.errors import AppError
from src.ms_integrity.domain.models import IntegrityReport, Violation
from src.ms_order.domain.models import Order
from src.ms_order.domain.repository import OrderRepositoryProtocol
from src.ms_product.domain.models import Product
from src.ms_product.domain.repository import ProductRepositoryProtocol

logger = logging.getLogger(__name__)


class ConsistencyChecker:
    def __init__(
        self,
        accounts: AccountRepositoryProtocol,
        products: ProductRepositoryProtocol,
        orders: OrderRepositoryProtocol,
        *,
        repair: bool | None = None,
    ) -> None:
        self._accounts = accounts
        self._products = products
        self._orders = orders
        self._repair = settings.INTEGRITY_REPAIR_ENABLED if repair is None else repair

    async def scan(self, repair: bool | None = None) -> IntegrityReport:
        report = IntegrityReport(started_at=utc_now())
        accounts = await self._accounts.list_all()
        products = await self._products.list_all()
        orders = await self._orders.list_all()
        report.scanned_accounts = len(accounts)
        report.scanned_products = len(products)
        report.scanned_orders = len(orders)

        report.violations.extend(
            _check_collection(
                EntityType.PRODUCT,
                {a.id: a.listing_ids for a in accounts},
                {p.id: p.owner_id for p in products},
            )
        )
        report.violations.extend(
            _check_collection(
                EntityType.ORDER,
                {a.id: list(a.order_refs) for a in accounts},
                {o.id: o.owner_id for o in orders},
            )
        )

        for violation in report.violations:
            logger.warning(
                "Integrity violation: kind=%s type=%s id=%s account=%s %s",
                violation.kind.value,
                violation.entity_type.value,
                violation.entity_id,
                violation.account_id,
                violation.detail,
            )

        if (self._repair if repair is None else repair) and report.violations:
            report.repaired = await self._repair_all(report.violations)

        report.finished_at = utc_now()
        logger.info(
            "Integrity scan done: accounts=%d products=%d orders=%d violations=%d repaired=%d",
            report.scanned_accounts,
            report.scanned_products,
            report.scanned_orders,
            len(report.violations),
            len(report.repaired),
        )
        return report

    async def _repair_all(self, violations: list[Violation]) -> list[Violation]:
        by_account: dict[str, list[Violation]] = defaultdict(list)
        for violation in violations:
            if violation.account_id is not None:
                by_account[violation.account_id].append(violation)

        repaired: list[Violation] = []
        for account_id, found in by_account.items():
            account = await self._accounts.get(account_id)
            if account is None:
                logger.warning("Repair skipped, owner missing: account=%s", account_id)
                continue
            applied: list[Violation] = []
            for violation in found:
                record = None
                if violation.kind == ViolationKind.ORPHAN:
                    # Re-read after the account: a delete that landed since the
                    # scan must not be re-attached.
                    record = await self._current_record(violation)
                    if record is None or record.owner_id != account_id:
                        logger.info(
                            "Repair skipped, record changed since scan: type=%s id=%s",
                            violation.entity_type.value,
                            violation.entity_id,
                        )
                        continue
                if _apply_fix(account, violation, record):
                    applied.append(violation)
            if not applied:
                continue
            try:
                await self._accounts.save(account)
            except AppError as exc:
                logger.warning(
                    "Repair not saved: account=%s code=%d %s", account_id, exc.code, exc.message
                )
                continue
            repaired.extend(applied)
        return repaired

    async def _current_record(self, violation: Violation) -> Product | Order | None:
        if violation.entity_type == EntityType.PRODUCT:
            return await self._products.get(violation.entity_id)
        return await self._orders.get(violation.entity_id)


def _check_collection(
    entity_type: EntityType,
    references: dict[str, list[str]],
    owners: dict[str, str],
) -> list[Violation]:
    """Compare account → ids against id → owner for one entity type."""
    violations: list[Violation] = []

    for account_id, ids in references.items():
        for entity_id, count in Counter(ids).items():
            if count > 1:
                violations.append(
                    Violation(
                        ViolationKind.DUPLICATE, entity_type, entity_id, account_id,
                        f"referenced {count} times",
                    )
                )
            owner_id = owners.get(entity_id)
            if owner_id is None:
                violations.append(
                    Violation(
                        ViolationKind.DANGLING, entity_type, entity_id, account_id,
                        "no canonical record",
                    )
                )
            elif owner_id != account_id:
                violations.append(
                    Violation(
                        ViolationKind.DANGLING, entity_type, entity_id, account_id,
                        f"record owned by {owner_id}",
                    )
                )

    for entity_id, owner_id in owners.items():
        if entity_id in references.get(owner_id, []):
            continue
        detail = "owner not found" if owner_id not in references else "not referenced by owner"
        violations.append(
            Violation(ViolationKind.ORPHAN, entity_type, entity_id, owner_id, detail)
        )

    return violations


def _apply_fix(account: Account, violation: Violation, record: Product | Order | None) -> bool:
    """Apply one fix to a freshly read account. False when nothing changed.

    ``record`` is the re-read canonical record, required for ORPHAN fixes.
    """
    is_product = violation.entity_type == EntityType.PRODUCT
    held = account.listing_ids if is_product else account.order_refs
    entity_id = violation.entity_id

    if violation.kind == ViolationKind.ORPHAN:
        if entity_id in held:
            return False
        if isinstance(record, Product):
            account.attach_listing(record)
        else:
            account.attach_order(entity_id)
        return True

    if violation.kind == ViolationKind.DANGLING:
        if entity_id not in held:
            return False
        if is_product:
            account.listings = [r for r in account.listings if r.product_id != entity_id]
        else:
            account.order_refs = [i for i in account.order_refs if i != entity_id]
        return True

    if held.count(entity_id) < 2:
        return False
    if is_product:
        first = next(r for r in account.listings if r.product_id == entity_id)
        account.listings = [
            r for r in account.listings if r.product_id != entity_id or r is first
        ]
    else:
        idx = account.order_refs.index(entity_id)
        account.order_refs = [
            i for n, i in enumerate(account.order_refs) if i != entity_id or n == idx
        ]
    return True

"""SyncCoordinator — keeps account projections and canonical records in step.

There is no transaction spanning the account store and the canonical stores,
so every compound operation is an ordered list of single-record writes:

  create / update   canonical record first, account projection second
  delete            account reference detached first, canonical record second

A reference therefore never outlives its referent. The worst state a failure
can leave is a canonical record nobody references (an orphan), which the
consistency checker reports and can re-attach.

Every public method returns an Outcome (Completed / Failed / PartialFailure);
store errors, timeouts and business-rule failures are never raised to the
caller.

Within one process, read-modify-save of an account is serialized per
account id, so concurrent requests against one account queue instead of
racing. Across processes the store's optimistic version check still guards
every save: on a version conflict the account is re-read and the mutation
re-applied, up to ACCOUNT_SAVE_MAX_RETRIES times; aggregate mutations are
idempotent so a replay never duplicates a reference.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from config.settings import settings
from src.ms_account.domain.models import Account, CartItem
from src.ms_account.domain.repository import AccountRepositoryProtocol
from src.ms_common.datetime_utils import utc_now
from src.ms_common.errors import (
    AccountNotFoundError,
    AppError,
    ConcurrentModificationError,
    InvalidPatchError,
    InvalidProductError,
    OrderNotFoundError,
    ProductNotFoundError,
    ReferenceMismatchError,
)
from src.ms_common.id_generator import (
    CART_ITEM_PREFIX,
    ORDER_PREFIX,
    PRODUCT_PREFIX,
    generate_id,
)
from src.ms_order.domain.models import Order
from src.ms_order.domain.repository import OrderRepositoryProtocol
from src.ms_product.domain.models import Product, build_product, validate_patch
from src.ms_product.domain.repository import ProductRepositoryProtocol
from src.ms_sync.domain.outcome import Completed, Failed, Outcome
from src.ms_sync.domain.steps import StepFailedError, StepSequence

logger = logging.getLogger(__name__)

M = TypeVar("M")


class SyncCoordinator:
    def __init__(
        self,
        accounts: AccountRepositoryProtocol,
        products: ProductRepositoryProtocol,
        orders: OrderRepositoryProtocol,
        *,
        store_timeout: float | None = None,
        save_retries: int | None = None,
    ) -> None:
        self._accounts = accounts
        self._products = products
        self._orders = orders
        self._timeout = (
            store_timeout if store_timeout is not None else settings.STORE_TIMEOUT_SECONDS
        )
        retries = save_retries if save_retries is not None else settings.ACCOUNT_SAVE_MAX_RETRIES
        self._save_retries = max(1, retries)
        self._account_locks: dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def add_listing(
        self,
        account_id: str,
        fields: dict[str, Any],
        idempotency_key: str | None = None,
    ) -> Outcome[Product]:
        """(1) create Product owned by the account; (2) attach it to account.listings.

        A failure in (2) leaves an orphaned Product and returns PartialFailure.
        Re-sending the same idempotency_key finds that Product and only runs (2).
        """
        product_id = idempotency_key or generate_id(PRODUCT_PREFIX)
        try:
            new_product = build_product(product_id, account_id, fields)
        except InvalidProductError as exc:
            return Failed(exc)

        seq = self._sequence("add_listing")
        try:
            owner = await seq.read("load_account", self._accounts.get(account_id))
            if owner is None:
                raise seq.fail("load_account", AccountNotFoundError(account_id))

            product = None
            if idempotency_key is not None:
                product = await self._resume_product(seq, product_id, account_id)
            if product is None:
                product = new_product
                await seq.write("create_product", self._products.create(product))

            listed = product
            await self._mutate_account(
                seq,
                "attach_listing",
                lambda: self._accounts.get(account_id),
                AccountNotFoundError(account_id),
                lambda account: account.attach_listing(listed),
            )
        except StepFailedError as failure:
            return seq.settle(failure, entity_id=product_id)
        return Completed(product)

    async def remove_listing(self, account_id: str, product_id: str) -> Outcome[Product]:
        """(1) detach the reference from the account; (2) delete the Product.

        The account's reference is the authority on ownership. A failure in
        (2) still reports the removal: the listing is gone from the owner's
        view and the leftover Product is an orphan for the checker.
        """
        seq = self._sequence("remove_listing")
        try:
            account = await seq.read("load_account", self._accounts.get(account_id))
            if account is None:
                raise seq.fail("load_account", AccountNotFoundError(account_id))
            product = await seq.read("load_product", self._products.get(product_id))
            product = self._authorize_listing(seq, account, product_id, product)

            await self._mutate_account(
                seq,
                "detach_listing",
                lambda: self._accounts.get(account_id),
                AccountNotFoundError(account_id),
                lambda acc: acc.detach_listing(product_id),
            )
        except StepFailedError as failure:
            return seq.settle(failure, entity_id=product_id)

        try:
            await seq.write("delete_product", self._products.delete(product_id))
        except StepFailedError as failure:
            return Completed(product, pending=seq.settle(failure, entity_id=product_id))
        return Completed(product)

    async def update_listing(
        self, account_id: str, product_id: str, patch: dict[str, Any]
    ) -> Outcome[Product]:
        """(1) patch the canonical Product; (2) refresh the account's cached summary.

        The summary is rebuilt from the post-update record, never by applying
        the patch a second time.
        """
        try:
            validate_patch(patch)
        except (InvalidPatchError, InvalidProductError) as exc:
            return Failed(exc)

        seq = self._sequence("update_listing")
        try:
            account = await seq.read("load_account", self._accounts.get(account_id))
            if account is None:
                raise seq.fail("load_account", AccountNotFoundError(account_id))
            product = await seq.read("load_product", self._products.get(product_id))
            self._authorize_listing(seq, account, product_id, product)

            updated = await seq.write(
                "update_product", self._products.update(product_id, patch)
            )
            if updated is None:
                raise seq.fail("update_product", ProductNotFoundError(product_id))

            await self._mutate_account(
                seq,
                "refresh_listing",
                lambda: self._accounts.get(account_id),
                AccountNotFoundError(account_id),
                lambda acc: acc.refresh_listing(updated),
            )
        except StepFailedError as failure:
            return seq.settle(failure, entity_id=product_id)
        return Completed(updated)

    # ------------------------------------------------------------------
    # Cart: account document only, one atomic save
    # ------------------------------------------------------------------

    async def add_cart_item(
        self, account_email: str, product_name: str, quantity: int
    ) -> Outcome[CartItem]:
        seq = self._sequence("add_cart_item")
        item_id = generate_id(CART_ITEM_PREFIX)
        try:
            product = await seq.read(
                "find_product", self._products.find_by_field("name", product_name)
            )
            if product is None:
                raise seq.fail("find_product", ProductNotFoundError(product_name))

            _, item = await self._mutate_account(
                seq,
                "save_cart",
                lambda: self._accounts.find_by_email(account_email),
                AccountNotFoundError(account_email),
                lambda acc: acc.add_cart_item(CartItem.from_product(item_id, product, quantity)),
            )
        except StepFailedError as failure:
            return seq.settle(failure, entity_id=item_id)
        return Completed(item)

    async def increment_cart_item(self, account_email: str, item_id: str) -> Outcome[CartItem]:
        return await self._change_cart(
            "increment_cart_item", account_email, item_id,
            lambda acc: acc.increment_cart_item(item_id),
        )

    async def decrement_cart_item(self, account_email: str, item_id: str) -> Outcome[CartItem]:
        """Quantity 1 → the line is removed; the returned item has quantity 0."""
        return await self._change_cart(
            "decrement_cart_item", account_email, item_id,
            lambda acc: acc.decrement_cart_item(item_id),
        )

    async def delete_cart_item(self, account_email: str, item_id: str) -> Outcome[CartItem]:
        return await self._change_cart(
            "delete_cart_item", account_email, item_id,
            lambda acc: acc.remove_cart_item(item_id),
        )

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def create_order(
        self,
        customer_email: str,
        fields: dict[str, Any],
        idempotency_key: str | None = None,
    ) -> Outcome[Order]:
        """(1) create the Order; (2) attach its id to the purchaser's order_refs."""
        seq = self._sequence("create_order")
        order_id = idempotency_key or generate_id(ORDER_PREFIX)
        try:
            customer = await seq.read(
                "load_account", self._accounts.find_by_email(customer_email)
            )
            if customer is None:
                raise seq.fail("load_account", AccountNotFoundError(customer_email))
            customer_id = customer.id

            order = None
            if idempotency_key is not None:
                order = await self._resume_order(seq, order_id, customer_id)
            if order is None:
                order = Order(
                    id=order_id,
                    owner_id=customer_id,
                    customer_email=customer_email,
                    total_price=fields["total_price"],
                    timestamp=fields.get("timestamp") or utc_now(),
                    purchased_items=list(fields.get("purchased_items", [])),
                    billing_info=fields.get("billing_info"),
                )
                await seq.write("create_order", self._orders.create(order))

            await self._mutate_account(
                seq,
                "attach_order",
                lambda: self._accounts.get(customer_id),
                AccountNotFoundError(customer_email),
                lambda acc: acc.attach_order(order_id),
            )
        except StepFailedError as failure:
            return seq.settle(failure, entity_id=order_id)
        return Completed(order)

    async def delete_order(self, order_id: str) -> Outcome[Order]:
        """(1) find the purchaser; (2) detach the order id; (3) delete the Order.

        When the purchaser's account cannot be found nothing is deleted: the
        canonical record is kept rather than destroyed without its reference
        side being cleaned up.
        """
        seq = self._sequence("delete_order")
        try:
            order = await seq.read("load_order", self._orders.get(order_id))
            if order is None:
                raise seq.fail("load_order", OrderNotFoundError(order_id))
            owner_id = order.owner_id

            owner = await seq.read("load_account", self._accounts.get(owner_id))
            if owner is None:
                raise seq.fail("load_account", AccountNotFoundError(owner_id))
            if order_id not in owner.order_refs:
                raise seq.fail("check_reference", ReferenceMismatchError(owner_id, order_id))

            await self._mutate_account(
                seq,
                "detach_order",
                lambda: self._accounts.get(owner_id),
                AccountNotFoundError(owner_id),
                lambda acc: acc.detach_order(order_id),
            )
        except StepFailedError as failure:
            return seq.settle(failure, entity_id=order_id)

        try:
            await seq.write("delete_order", self._orders.delete(order_id))
        except StepFailedError as failure:
            return Completed(order, pending=seq.settle(failure, entity_id=order_id))
        return Completed(order)

    # ------------------------------------------------------------------
    # Account deletion: explicit cascade
    # ------------------------------------------------------------------

    async def delete_account(self, account_id: str) -> Outcome[Account]:
        """Detach every reference, delete owned Products and Orders, then the Account.

        Records owned by the account but never referenced from it (orphans) are
        swept up too. Any failure after the detach step is a PartialFailure;
        whatever is left over is reported by the checker.
        """
        seq = self._sequence("delete_account")
        try:
            account = await seq.read("load_account", self._accounts.get(account_id))
            if account is None:
                raise seq.fail("load_account", AccountNotFoundError(account_id))

            _, (product_ids, order_ids) = await self._mutate_account(
                seq,
                "detach_all",
                lambda: self._accounts.get(account_id),
                AccountNotFoundError(account_id),
                lambda acc: acc.detach_all(),
            )
            owned_products = await seq.read(
                "list_owned_products", self._products.list_by_owner(account_id)
            )
            owned_orders = await seq.read(
                "list_owned_orders", self._orders.list_by_owner(account_id)
            )

            for product_id in _merge_ids(product_ids, [p.id for p in owned_products]):
                await seq.write(f"delete_product:{product_id}", self._products.delete(product_id))
            for order_id in _merge_ids(order_ids, [o.id for o in owned_orders]):
                await seq.write(f"delete_order:{order_id}", self._orders.delete(order_id))
            await seq.write("delete_account", self._accounts.delete(account_id))
        except StepFailedError as failure:
            return seq.settle(failure, entity_id=account_id)
        return Completed(account)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _sequence(self, operation: str) -> StepSequence:
        return StepSequence(operation, self._timeout)

    async def _mutate_account(
        self,
        seq: StepSequence,
        step: str,
        load: Callable[[], Awaitable[Account | None]],
        missing: AppError,
        mutate: Callable[[Account], M],
    ) -> tuple[Account, M]:
        """Read-modify-save one account under its lock, replaying on version conflicts.

        The first read only resolves the account id; every attempt re-reads
        inside the lock so the mutation applies to the latest version.
        """
        found = await seq.read("load_account", load())
        if found is None:
            raise seq.fail(step, missing)

        async with self._account_lock(found.id):
            attempt = 0
            while True:
                attempt += 1
                account = await seq.read("load_account", load())
                if account is None:
                    raise seq.fail(step, missing)
                try:
                    result = mutate(account)
                except AppError as exc:
                    raise seq.fail(step, exc) from exc
                try:
                    saved = await seq.write(step, self._accounts.save(account))
                except StepFailedError as failure:
                    if (
                        isinstance(failure.cause, ConcurrentModificationError)
                        and attempt < self._save_retries
                    ):
                        logger.info(
                            "Account version conflict, replaying: "
                            "op=%s step=%s account=%s attempt=%d",
                            seq.operation,
                            step,
                            account.id,
                            attempt,
                        )
                        continue
                    raise
                return saved, result

    def _account_lock(self, account_id: str) -> asyncio.Lock:
        lock = self._account_locks.get(account_id)
        if lock is None:
            lock = self._account_locks[account_id] = asyncio.Lock()
        return lock

    async def _change_cart(
        self,
        operation: str,
        account_email: str,
        item_id: str,
        mutate: Callable[[Account], CartItem],
    ) -> Outcome[CartItem]:
        seq = self._sequence(operation)
        try:
            _, item = await self._mutate_account(
                seq,
                "save_cart",
                lambda: self._accounts.find_by_email(account_email),
                AccountNotFoundError(account_email),
                mutate,
            )
        except StepFailedError as failure:
            return seq.settle(failure, entity_id=item_id)
        return Completed(item)

    def _authorize_listing(
        self,
        seq: StepSequence,
        account: Account,
        product_id: str,
        product: Product | None,
    ) -> Product:
        """Ownership is decided by the account's reference, not Product.owner_id."""
        if not account.has_listing(product_id):
            if product is None:
                raise seq.fail("check_reference", ProductNotFoundError(product_id))
            raise seq.fail("check_reference", ReferenceMismatchError(account.id, product_id))
        if product is None:
            # Dangling reference; left for the checker to report.
            raise seq.fail("load_product", ProductNotFoundError(product_id))
        return product

    async def _resume_product(
        self, seq: StepSequence, product_id: str, account_id: str
    ) -> Product | None:
        existing = await seq.read("find_product", self._products.get(product_id))
        if existing is None:
            return None
        if existing.owner_id != account_id:
            raise seq.fail("find_product", ReferenceMismatchError(account_id, product_id))
        logger.info("Listing idempotency hit: key=%s account=%s", product_id, account_id)
        return existing

    async def _resume_order(
        self, seq: StepSequence, order_id: str, customer_id: str
    ) -> Order | None:
        existing = await seq.read("find_order", self._orders.get(order_id))
        if existing is None:
            return None
        if existing.owner_id != customer_id:
            raise seq.fail("find_order", ReferenceMismatchError(customer_id, order_id))
        logger.info("Order idempotency hit: key=%s account=%s", order_id, customer_id)
        return existing


def _merge_ids(first: list[str], second: list[str]) -> list[str]:
    """Order-preserving union."""
    return list(dict.fromkeys([*first, *second]))

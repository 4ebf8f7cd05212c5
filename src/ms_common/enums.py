"""Shared enums — string values are what the API and reports expose."""

from enum import Enum


class EntityType(str, Enum):
    ACCOUNT = "ACCOUNT"
    PRODUCT = "PRODUCT"
    ORDER = "ORDER"
    CART_ITEM = "CART_ITEM"


class ViolationKind(str, Enum):
    """Consistency checker findings."""
    ORPHAN = "ORPHAN"          # canonical record with no owning reference
    DANGLING = "DANGLING"      # account reference with no matching canonical record
    DUPLICATE = "DUPLICATE"    # same id referenced more than once by one account

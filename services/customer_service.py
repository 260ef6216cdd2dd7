"""
Customer resolution for marketplace sales.

A marketplace buyer is identified only by tax id. The first purchase by a
document creates the customer; every later purchase reuses that record
unchanged, even if the request carries a different name or email.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.customer import DEFAULT_CUSTOMER_NAME, Customer
from domain.errors import DuplicateRecordError
from domain.time import utc_now
from repositories.customer_repository import create_customer, get_customer_by_document

logger = logging.getLogger(__name__)


def resolve_or_create_customer(
    document: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> Customer:
    """
    Return the customer for a normalized document, creating it if needed.

    Args:
        document: Normalized CPF digits (already validated)
        name: Name for a new customer (default "Customer")
        email: Email for a new customer (default "")
        phone: Phone for a new customer

    Returns:
        Existing or newly created Customer

    Example:
        customer = resolve_or_create_customer("12345678909", name="Ana Souza")
    """

    existing = get_customer_by_document(document)
    if existing is not None:
        return existing

    try:
        customer = create_customer(
            name=name or DEFAULT_CUSTOMER_NAME,
            email=email or "",
            document=document,
            phone=phone,
            created_at=utc_now(),
        )
    except DuplicateRecordError:
        # A concurrent first purchase created the row between our read and insert.
        winner = get_customer_by_document(document)
        if winner is None:
            raise
        logger.info(
            "Customer created concurrently, reusing existing record",
            extra={"customer_id": str(winner.customer_id)},
        )
        return winner

    logger.info("Customer created", extra={"customer_id": str(customer.customer_id)})
    return customer


__all__ = ["resolve_or_create_customer"]

"""
Default salesperson provisioning.

Marketplace sales have no salesperson in the request, but every sale must
reference one. They are credited to the first active salesperson; when the
store has none yet, a zero-commission house salesperson is created once and
reused from then on.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from domain.errors import DuplicateRecordError
from domain.salesperson import (
    HOUSE_EMPLOYEE_CODE,
    HOUSE_SALESPERSON_EMAIL,
    HOUSE_SALESPERSON_NAME,
)
from domain.time import utc_now
from repositories.salesperson_repository import (
    create_salesperson,
    get_first_active_salesperson,
    get_salesperson_by_employee_code,
)

logger = logging.getLogger(__name__)


def get_default_salesperson_id() -> UUID:
    """
    Return the salesperson credited with marketplace sales.

    Returns:
        ID of the earliest active salesperson, or of the house salesperson
        (created on first call when no active salesperson exists)
    """

    first_active = get_first_active_salesperson()
    if first_active is not None:
        return first_active.salesperson_id

    try:
        house = create_salesperson(
            name=HOUSE_SALESPERSON_NAME,
            email=HOUSE_SALESPERSON_EMAIL,
            employee_code=HOUSE_EMPLOYEE_CODE,
            commission_rate=Decimal("0"),
            created_at=utc_now(),
        )
    except DuplicateRecordError:
        existing = get_salesperson_by_employee_code(HOUSE_EMPLOYEE_CODE)
        if existing is None:
            raise
        return existing.salesperson_id

    logger.info(
        "House salesperson provisioned",
        extra={"salesperson_id": str(house.salesperson_id), "employee_code": HOUSE_EMPLOYEE_CODE},
    )
    return house.salesperson_id


__all__ = ["get_default_salesperson_id"]

"""Gap-free invoice numbers backed by counters in the settings table."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy import Integer, String, cast, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ordering.core.errors import ConcurrencyError
from ordering.models.app_setting import AppSetting

logger = logging.getLogger(__name__)

CASH_PREFIX: str = "1250"
NON_CASH_PREFIX: str = "2250"

T = TypeVar("T")


def counter_key(payment_method: str, year: int) -> str:
    return f"invoice_counter_{payment_method.lower()}_{year}"


def format_invoice_number(payment_method: str, counter: int) -> str:
    """Return ``1250NNNN`` for cash and ``2250NNNN`` for any other method.

    The year is not part of the number, so numbers repeat after the yearly
    reset. Existing invoices rely on this format.
    """
    prefix = CASH_PREFIX if payment_method == "CASH" else NON_CASH_PREFIX
    return f"{prefix}{counter:04d}"


class InvoiceNumberAuthority:
    """Allocates invoice numbers per payment method and year.

    Callers own the transaction: the increment only becomes durable when the
    surrounding session commits, together with the invoice row that uses it.
    """

    def _ensure_counter(self, db: Session, key: str) -> None:
        values = {"key": key, "value": "0", "value_type": "number"}
        dialect = db.get_bind().dialect.name
        if dialect == "sqlite":
            db.execute(sqlite_insert(AppSetting).values(**values).on_conflict_do_nothing(index_elements=["key"]))
            return
        if dialect == "postgresql":
            db.execute(postgresql_insert(AppSetting).values(**values).on_conflict_do_nothing(index_elements=["key"]))
            return

        try:
            with db.begin_nested():
                db.add(AppSetting(**values))
        except IntegrityError:
            logger.debug("[INVOICE] Counter %s already exists", key)

    def next_counter(self, db: Session, payment_method: str, year: int) -> int:
        key = counter_key(payment_method, year)
        self._ensure_counter(db, key)
        new_value = db.execute(
            update(AppSetting)
            .where(AppSetting.key == key)
            .values(value=cast(cast(AppSetting.value, Integer) + 1, String))
            .returning(AppSetting.value)
            .execution_options(synchronize_session=False)
        ).scalar_one()
        return int(new_value)

    def next_invoice_number(self, db: Session, payment_method: str, year: int) -> str:
        counter = self.next_counter(db, payment_method, year)
        invoice_number = format_invoice_number(payment_method, counter)
        logger.info("[INVOICE] Allocated %s (method=%s year=%s)", invoice_number, payment_method, year)
        return invoice_number


def run_in_transaction(
    session_factory: Callable[[], Session],
    work: Callable[[Session], T],
    *,
    attempts: int = 5,
    base_delay: float = 0.05,
) -> T:
    """Run ``work`` in a fresh session and commit, retrying lock contention.

    Only ``OperationalError`` (locked / serialization failures) is retried,
    with exponential backoff. Anything else is rolled back and re-raised.
    """
    for attempt in range(1, attempts + 1):
        db = session_factory()
        try:
            result = work(db)
            db.commit()
            return result
        except OperationalError as exc:
            db.rollback()
            if attempt == attempts:
                logger.error("[INVOICE] Giving up after %s attempts: %s", attempts, exc)
                raise ConcurrencyError("Could not allocate invoice number, please retry") from exc
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning("[INVOICE] Counter contention (attempt %s/%s), retrying in %.2fs", attempt, attempts, delay)
            time.sleep(delay)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
    raise ConcurrencyError("Could not allocate invoice number, please retry")

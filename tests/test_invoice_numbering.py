"""Invoice counter allocation, including concurrent callers."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ordering.core.config import settings
from ordering.db.base import Base
from ordering.models.app_setting import AppSetting
from ordering.models.invoice import Invoice
from ordering.models.order import Order
from ordering.services.invoice_builder import CompanyInfo
from ordering.services.invoice_numbering import (
    InvoiceNumberAuthority,
    counter_key,
    format_invoice_number,
    run_in_transaction,
)
from ordering.services.invoice_service import InvoiceService
from ordering.services.notifications import NotificationDispatcher, NullEmailTransport


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )


def test_invoice_number_format() -> None:
    assert format_invoice_number("CASH", 1) == "12500001"
    assert format_invoice_number("CARD", 42) == "22500042"
    assert format_invoice_number("ONLINE", 12345) == "225012345"
    assert counter_key("CASH", 2026) == "invoice_counter_cash_2026"


def test_counters_are_consecutive_and_scoped(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "test_counters.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    authority = InvoiceNumberAuthority()

    def allocate(method: str, year: int) -> str:
        return run_in_transaction(testing_session_local, lambda db: authority.next_invoice_number(db, method, year))

    assert allocate("CASH", 2026) == "12500001"
    assert allocate("CASH", 2026) == "12500002"
    assert allocate("CARD", 2026) == "22500001"
    assert allocate("ONLINE", 2026) == "22500001"
    assert allocate("CASH", 2027) == "12500001"

    with testing_session_local() as db:
        counter = db.get(AppSetting, "invoice_counter_cash_2026")
        assert counter.value == "2"
        assert counter.value_type == "number"


def test_rolled_back_allocation_does_not_consume_a_number(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "test_counter_rollback.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    authority = InvoiceNumberAuthority()

    def failing(db):
        authority.next_counter(db, "CASH", 2026)
        raise RuntimeError("insert failed")

    try:
        run_in_transaction(testing_session_local, failing)
    except RuntimeError:
        pass

    number = run_in_transaction(testing_session_local, lambda db: authority.next_invoice_number(db, "CASH", 2026))
    assert number == "12500001"


def test_concurrent_allocations_are_gap_free(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "test_counter_threads.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    authority = InvoiceNumberAuthority()

    def allocate(_: int) -> int:
        return run_in_transaction(
            testing_session_local,
            lambda db: authority.next_counter(db, "CARD", 2026),
            attempts=10,
        )

    with ThreadPoolExecutor(max_workers=4) as pool:
        counters = list(pool.map(allocate, range(20)))

    assert sorted(counters) == list(range(1, 21))


def test_concurrent_invoice_issuance_for_different_orders_is_gap_free(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "test_issue_threads.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    with testing_session_local() as db:
        orders = [
            Order(
                order_number=f"PCB-20260301-120000-{index:03d}",
                order_type="PICKUP",
                payment_method="CASH",
                customer_name="Eva",
                customer_phone="+421900000000",
                subtotal=Decimal("5.00"),
                total=Decimal("5.00"),
                created_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
            )
            for index in range(1, 13)
        ]
        db.add_all(orders)
        db.commit()
        order_ids = [order.id for order in orders]

    service = InvoiceService(
        testing_session_local,
        InvoiceNumberAuthority(),
        NotificationDispatcher(NullEmailTransport(), settings),
        CompanyInfo(name="Restaurant s.r.o.", address="Hlavná 1", city="Komárno"),
        retry_attempts=10,
    )

    with ThreadPoolExecutor(max_workers=4) as pool:
        invoice_ids = list(pool.map(service.issue_for_order, order_ids))

    assert len(set(invoice_ids)) == len(order_ids)
    with testing_session_local() as db:
        numbers = sorted(db.scalars(select(Invoice.invoice_number)))
        stored_counter = db.get(AppSetting, "invoice_counter_cash_2026").value

    assert numbers == [format_invoice_number("CASH", value) for value in range(1, 13)]
    assert stored_counter == "12"

"""Invoice retrieval, PDF download and resend through the admin API."""

from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ordering import main as main_module
from ordering.core.security import get_password_hash
from ordering.db import session as db_session
from ordering.db.base import Base
from ordering.main import app
from ordering.models.admin_user import AdminUser
from ordering.models.invoice import Invoice
from ordering.models.menu import MenuItem


class RecordingTransport:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    def send(self, to, subject, html, attachment=None) -> None:
        self.sent.append({"to": to, "subject": subject, "attachment": attachment})


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _prepare(tmp_path: Path, monkeypatch, name: str, transport: RecordingTransport | None = None):
    engine = _build_test_engine(tmp_path / name)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    if transport is not None:
        monkeypatch.setattr(main_module, "build_email_transport", lambda config: transport)
    else:
        monkeypatch.setattr(main_module.settings, "smtp_host", "")

    with testing_session_local() as db:
        burger = MenuItem(
            slug="classic-burger",
            name="Classic Burger",
            category="Burgers",
            price=Decimal("8.90"),
            includes_sides=True,
        )
        db.add_all(
            [
                burger,
                AdminUser(
                    email="owner@example.com",
                    first_name="Owner",
                    password_hash=get_password_hash("secret123"),
                    role="ADMIN",
                ),
            ]
        )
        db.commit()
        burger_id = burger.id
    return testing_session_local, burger_id


def _admin_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/api/v1/admin/auth/login", json={"email": "owner@example.com", "password": "secret123"})
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _place(client: TestClient, burger_id: int, payment_method: str = "CASH") -> dict:
    response = client.post(
        "/api/v1/orders",
        json={
            "order_type": "PICKUP",
            "payment_method": payment_method,
            "customer_name": "Ján Novák",
            "customer_phone": "+421900123456",
            "customer_email": "jan@example.com",
            "items": [{"menu_item_id": burger_id, "quantity": 2, "fries_upgrade": "sweet-potato"}],
        },
    )
    assert response.status_code == 201
    return response.json()


def _fake_pdf(document) -> bytes:
    return b"%PDF-1.4 fake " + document.invoice_number.encode()


def test_invoice_totals_and_delivery_bookkeeping(tmp_path: Path, monkeypatch) -> None:
    transport = RecordingTransport()
    _, burger_id = _prepare(tmp_path, monkeypatch, "test_invoice_totals.db", transport)

    with TestClient(app) as client:
        app.state.invoice_service.renderer = _fake_pdf
        order = _place(client, burger_id)
        response = client.get(f"/api/v1/admin/orders/{order['id']}/invoice", headers=_admin_headers(client))

    assert response.status_code == 200
    invoice = response.json()
    assert invoice["invoice_number"] == "12500001"
    assert Decimal(invoice["total_gross"]) == Decimal("20.40")
    assert Decimal(invoice["vat_amount"]) == Decimal("3.88")
    assert Decimal(invoice["total_net"]) == Decimal("16.52")
    assert invoice["email_sent"] is True
    assert invoice["email_attempts"] == 1
    assert invoice["items"][0]["customizations"] == "Krumpli: Batátové hranolky"


def test_each_order_gets_exactly_one_sequential_invoice(tmp_path: Path, monkeypatch) -> None:
    transport = RecordingTransport()
    testing_session_local, burger_id = _prepare(tmp_path, monkeypatch, "test_invoice_sequence.db", transport)

    with TestClient(app) as client:
        app.state.invoice_service.renderer = _fake_pdf
        numbers = [_place(client, burger_id)["invoice_number"] for _ in range(3)]
        card_number = _place(client, burger_id, payment_method="CARD")["invoice_number"]
        first_id = app.state.invoice_service.issue_for_order(1)
        second_id = app.state.invoice_service.issue_for_order(1)

    assert numbers == ["12500001", "12500002", "12500003"]
    assert card_number == "22500001"
    assert first_id == second_id
    with testing_session_local() as db:
        assert db.scalar(select(func.count(Invoice.id))) == 4


def test_resend_keeps_number_and_accepts_override_address(tmp_path: Path, monkeypatch) -> None:
    transport = RecordingTransport()
    _, burger_id = _prepare(tmp_path, monkeypatch, "test_invoice_resend.db", transport)

    with TestClient(app) as client:
        app.state.invoice_service.renderer = _fake_pdf
        order = _place(client, burger_id)
        headers = _admin_headers(client)
        resend = client.post(
            f"/api/v1/admin/orders/{order['id']}/invoice/resend",
            json={"email": "accounting@example.com"},
            headers=headers,
        )
        invoice = client.get(f"/api/v1/admin/orders/{order['id']}/invoice", headers=headers).json()

    assert resend.status_code == 200
    assert resend.json() == {"success": True, "invoice_number": "12500001", "error": None}
    assert transport.sent[-1]["to"] == "accounting@example.com"
    assert transport.sent[-1]["attachment"].content == b"%PDF-1.4 fake 12500001"
    assert invoice["invoice_number"] == "12500001"
    assert invoice["email_attempts"] == 2


def test_missing_smtp_does_not_block_orders(tmp_path: Path, monkeypatch) -> None:
    _, burger_id = _prepare(tmp_path, monkeypatch, "test_invoice_no_smtp.db")

    with TestClient(app) as client:
        app.state.invoice_service.renderer = _fake_pdf
        order = _place(client, burger_id)
        headers = _admin_headers(client)
        invoice = client.get(f"/api/v1/admin/orders/{order['id']}/invoice", headers=headers).json()
        resend = client.post(f"/api/v1/admin/orders/{order['id']}/invoice/resend", headers=headers)

    assert order["invoice_number"] == "12500001"
    assert invoice["email_sent"] is False
    assert invoice["last_email_error"] == "Email service not configured"
    assert resend.json()["success"] is False
    assert resend.json()["error"] == "Email service not configured"
    assert resend.json()["invoice_number"] == "12500001"


def test_invoice_pdf_download(tmp_path: Path, monkeypatch) -> None:
    transport = RecordingTransport()
    _, burger_id = _prepare(tmp_path, monkeypatch, "test_invoice_pdf_download.db", transport)

    with TestClient(app) as client:
        app.state.invoice_service.renderer = _fake_pdf
        order = _place(client, burger_id)
        headers = _admin_headers(client)
        response = client.get(f"/api/v1/admin/orders/{order['id']}/invoice.pdf", headers=headers)
        missing = client.get("/api/v1/admin/orders/999/invoice", headers=headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="faktura-12500001.pdf"' in response.headers["content-disposition"]
    assert response.content == b"%PDF-1.4 fake 12500001"
    assert missing.status_code == 404


def test_order_is_kept_when_invoice_issuance_fails(tmp_path: Path, monkeypatch) -> None:
    transport = RecordingTransport()
    testing_session_local, burger_id = _prepare(tmp_path, monkeypatch, "test_invoice_issue_failure.db", transport)

    with TestClient(app) as client:
        invoices = app.state.invoice_service
        invoices.renderer = _fake_pdf
        issue = invoices.issue_for_order
        calls: list[int] = []

        def fail_first_issue(order_id: int) -> int:
            calls.append(order_id)
            if len(calls) == 1:
                raise IntegrityError("INSERT INTO invoices", {}, Exception("constraint failed"))
            return issue(order_id)

        invoices.issue_for_order = fail_first_issue
        order = _place(client, burger_id)
        headers = _admin_headers(client)
        missing = client.get(f"/api/v1/admin/orders/{order['id']}/invoice", headers=headers)
        resend = client.post(f"/api/v1/admin/orders/{order['id']}/invoice/resend", headers=headers)

    assert order["invoice_number"] is None
    assert missing.status_code == 404
    assert resend.status_code == 200
    assert resend.json()["invoice_number"] == "12500001"
    with testing_session_local() as db:
        assert db.scalar(select(func.count(Invoice.id))) == 1

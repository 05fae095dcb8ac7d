"""
API tests against an in-memory SQLite database.

    pytest backend/tests -v
"""
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import OTHER_USER_HEADERS, TEMPLATE_HTML, USER_HEADERS


def invoice_payload(client_id, **overrides):
    payload = {
        "client_id": client_id,
        "invoice_number": "INV-001",
        "issue_date": date.today().isoformat(),
        "due_date": (date.today() + timedelta(days=30)).isoformat(),
        "currency": "USD",
        "items": [
            {"description": "Widget", "quantity": 2, "unit_price": 50,
             "custom_fields": [{"name": "Shipping", "value": "10"}]},
            {"description": "Gadget", "quantity": 1, "unit_price": 30},
        ],
        "custom_columns": [{"name": "Shipping", "type": "additive"}],
        "discount": 5,
    }
    payload.update(overrides)
    return payload


def create_invoice(client, customer, **overrides):
    response = client.post("/api/invoices", json=invoice_payload(customer["id"], **overrides), headers=USER_HEADERS)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json()["message"] == "Invoicer API"

    def test_health_reports_template_generation(self, client):
        data = client.get("/health").json()
        assert data == {"status": "healthy", "template_generation": True}


class TestAuth:
    def test_missing_user_header(self, client):
        response = client.get("/api/invoices")
        assert response.status_code == 401
        assert response.json()["detail"] == "User not authenticated"


class TestClients:
    def test_crud(self, client, customer):
        assert [c["name"] for c in client.get("/api/clients", headers=USER_HEADERS).json()] == ["Acme Corp"]

        response = client.put(f"/api/clients/{customer['id']}", json={"phone_number": "555-0100"}, headers=USER_HEADERS)
        assert response.json()["phone_number"] == "555-0100"

        response = client.delete(f"/api/clients/{customer['id']}", headers=USER_HEADERS)
        assert response.json() == {"message": "Client deleted", "id": customer["id"]}
        assert client.get(f"/api/clients/{customer['id']}", headers=USER_HEADERS).status_code == 404

    def test_invalid_email(self, client):
        response = client.post("/api/clients", json={"name": "X", "email": "nope", "address": "Y"}, headers=USER_HEADERS)
        assert response.status_code == 422

    def test_other_user_is_denied(self, client, customer, caplog):
        with caplog.at_level("WARNING", logger="invoicer.diagnostics"):
            response = client.get(f"/api/clients/{customer['id']}", headers=OTHER_USER_HEADERS)
        assert response.status_code == 403
        assert response.json() == {"detail": "Permission denied"}
        assert any("Permission denied" in record.getMessage() for record in caplog.records)

    def test_lists_are_per_user(self, client, customer):
        assert client.get("/api/clients", headers=OTHER_USER_HEADERS).json() == []


class TestInvoices:
    def test_create_computes_totals(self, client, customer):
        data = create_invoice(client, customer)
        assert Decimal(data["total_amount"]) == Decimal("135")
        assert Decimal(data["totals"]["subtotal"]) == Decimal("140")
        assert data["client_name"] == "Acme Corp"
        assert data["status"] == "Pending"
        assert data["items"][1]["custom_fields"] == [{"name": "Shipping", "value": ""}]
        assert data["view"]["header"] == ["Description", "Qty", "Price", "Shipping", "Total"]

    def test_create_requires_description(self, client, customer):
        payload = invoice_payload(customer["id"], items=[{"description": " ", "quantity": 1, "unit_price": 1}])
        response = client.post("/api/invoices", json=payload, headers=USER_HEADERS)
        assert response.status_code == 422

    def test_create_rejects_duplicate_columns(self, client, customer):
        columns = [{"name": "Fee", "type": "additive"}, {"name": "Fee", "type": "text"}]
        response = client.post("/api/invoices", json=invoice_payload(customer["id"], custom_columns=columns), headers=USER_HEADERS)
        assert response.status_code == 409

    def test_create_for_other_users_client(self, client, customer):
        response = client.post("/api/invoices", json=invoice_payload(customer["id"]), headers=OTHER_USER_HEADERS)
        assert response.status_code == 403

    def test_list_and_overdue_status(self, client, customer):
        create_invoice(client, customer)
        past = (date.today() - timedelta(days=1)).isoformat()
        create_invoice(client, customer, invoice_number="INV-002", due_date=past)

        invoices = client.get("/api/invoices", headers=USER_HEADERS).json()
        assert [i["invoice_number"] for i in invoices] == ["INV-002", "INV-001"]
        assert [i["status"] for i in invoices] == ["Overdue", "Pending"]
        assert invoices[1]["formatted_total"] == "$135.00"

    def test_update_recomputes_total(self, client, customer):
        invoice = create_invoice(client, customer)
        response = client.put(f"/api/invoices/{invoice['id']}", json={"discount": 0}, headers=USER_HEADERS)
        assert response.status_code == 200
        assert Decimal(response.json()["total_amount"]) == Decimal("140")

    def test_delete(self, client, customer):
        invoice = create_invoice(client, customer)
        assert client.delete(f"/api/invoices/{invoice['id']}", headers=USER_HEADERS).status_code == 200
        assert client.get(f"/api/invoices/{invoice['id']}", headers=USER_HEADERS).status_code == 404

    def test_other_user_cannot_read(self, client, customer):
        invoice = create_invoice(client, customer)
        assert client.get(f"/api/invoices/{invoice['id']}", headers=OTHER_USER_HEADERS).status_code == 403

    def test_preview_stores_nothing(self, client):
        payload = {
            "items": [{"description": "Widget", "quantity": 2, "unit_price": 50}],
            "custom_columns": [],
        }
        response = client.post("/api/invoices/preview", json=payload, headers=USER_HEADERS)
        assert response.status_code == 200
        totals = response.json()["totals"]
        assert Decimal(totals["subtotal"]) == Decimal(totals["total_amount"]) == Decimal(totals["amount_due"]) == Decimal("100")
        assert client.get("/api/invoices", headers=USER_HEADERS).json() == []


class TestPayments:
    def test_payment_reduces_amount_due(self, client, customer):
        invoice = create_invoice(client, customer)
        response = client.post(f"/api/invoices/{invoice['id']}/payments", json={"amount": "35"}, headers=USER_HEADERS)
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["total_paid"]) == Decimal("35")
        assert Decimal(data["amount_due"]) == Decimal("100")
        assert data["message"] == "$35.00 has been added to invoice INV-001."

    def test_non_positive_payment(self, client, customer):
        invoice = create_invoice(client, customer)
        response = client.post(f"/api/invoices/{invoice['id']}/payments", json={"amount": 0}, headers=USER_HEADERS)
        assert response.status_code == 422


class TestColumnEndpoints:
    def test_insert_after_fixed_column(self, client, customer):
        invoice = create_invoice(client, customer)
        response = client.post(
            f"/api/invoices/{invoice['id']}/columns",
            json={"name": "Tax", "type": "subtractive", "reference_column": "Price", "position": "after"},
            headers=USER_HEADERS,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["index"] == 0
        assert data["columns"] == ["Description", "Qty", "Price", "Tax", "Shipping"]
        assert [f["name"] for f in data["items"][0]["custom_fields"]] == ["Tax", "Shipping"]
        assert Decimal(data["totals"]["subtotal"]) == Decimal("140")

    def test_duplicate_column(self, client, customer):
        invoice = create_invoice(client, customer)
        response = client.post(f"/api/invoices/{invoice['id']}/columns", json={"name": "Shipping"}, headers=USER_HEADERS)
        assert response.status_code == 409
        assert response.json()["detail"] == "Column 'Shipping' already exists"

    def test_unknown_reference(self, client, customer):
        invoice = create_invoice(client, customer)
        response = client.post(
            f"/api/invoices/{invoice['id']}/columns",
            json={"name": "Tax", "reference_column": "Nope"},
            headers=USER_HEADERS,
        )
        assert response.status_code == 400

    def test_remove_column_twice(self, client, customer):
        invoice = create_invoice(client, customer)
        url = f"/api/invoices/{invoice['id']}/columns/Shipping"

        response = client.delete(url, headers=USER_HEADERS)
        assert response.status_code == 200
        assert response.json()["index"] == 0
        assert Decimal(response.json()["totals"]["total_amount"]) == Decimal("125")

        response = client.delete(url, headers=USER_HEADERS)
        assert response.status_code == 404
        stored = client.get(f"/api/invoices/{invoice['id']}", headers=USER_HEADERS).json()
        assert stored["custom_columns"] == []
        assert Decimal(stored["total_amount"]) == Decimal("125")


class TestCompanyProfileAndTemplates:
    def save_profile(self, client):
        response = client.put(
            "/api/company-profile",
            json={"company_name": "Umbrella", "email": "hello@umbrella.com", "address": "2 Side St"},
            headers=USER_HEADERS,
        )
        assert response.status_code == 200
        return response.json()

    def test_profile_missing(self, client):
        assert client.get("/api/company-profile", headers=USER_HEADERS).status_code == 404

    def test_logo_upload_and_download(self, client):
        self.save_profile(client)
        response = client.post(
            "/api/company-profile/logo",
            files={"file": ("logo.png", b"\x89PNG data", "image/png")},
            headers=USER_HEADERS,
        )
        assert response.status_code == 200
        logo_url = response.json()["logo_url"]
        assert logo_url.startswith("/api/company-profile/logo/logos/user-1/")

        download = client.get(logo_url, headers=USER_HEADERS)
        assert download.content == b"\x89PNG data"
        assert client.get(logo_url, headers=OTHER_USER_HEADERS).status_code == 404

    def test_logo_rejects_unsupported_type(self, client):
        self.save_profile(client)
        response = client.post(
            "/api/company-profile/logo",
            files={"file": ("logo.exe", b"MZ", "application/octet-stream")},
            headers=USER_HEADERS,
        )
        assert response.status_code == 400

    def test_generate_template(self, client, completions):
        response = client.post(
            "/api/templates/generate",
            json={"company_name": "Umbrella", "company_branding": "Bold", "late_fee_conditions": "2% monthly"},
            headers=USER_HEADERS,
        )
        assert response.json() == {"success": True, "data": {"invoice_template": TEMPLATE_HTML}, "error": None}
        prompt = completions.calls[0]["messages"][1]["content"][0]["text"]
        assert "2% monthly" in prompt

    def test_generate_template_failure(self, client, completions):
        completions.error = RuntimeError("upstream down")
        response = client.post(
            "/api/templates/generate",
            json={"company_name": "Umbrella", "company_branding": "Bold", "late_fee_conditions": "None"},
            headers=USER_HEADERS,
        )
        assert response.json() == {"success": False, "data": None, "error": "Failed to generate invoice template."}

    def test_saved_template_renders_invoice(self, client, customer):
        self.save_profile(client)
        client.put("/api/templates/current", json={"invoice_template": TEMPLATE_HTML}, headers=USER_HEADERS)
        invoice = create_invoice(client, customer)

        html = client.get(f"/api/invoices/{invoice['id']}/html", headers=USER_HEADERS).text
        assert "<h1>INV-001</h1>" in html
        assert "$135.00" in html


class TestDashboard:
    def test_figures(self, client, customer):
        first = create_invoice(client, customer)
        create_invoice(client, customer, invoice_number="INV-002", discount=0)
        client.post(f"/api/invoices/{first['id']}/payments", json={"amount": 35}, headers=USER_HEADERS)

        data = client.get("/api/dashboard", headers=USER_HEADERS).json()
        assert Decimal(data["total_revenue"]) == Decimal("275")
        assert Decimal(data["total_collected"]) == Decimal("35")
        assert Decimal(data["total_outstanding"]) == Decimal("240")
        assert data["formatted_revenue"] == "$275.00"
        assert [point["name"] for point in data["chart_data"]] == ["INV-001", "INV-002"]
        assert [i["invoice_number"] for i in data["recent_invoices"]] == ["INV-002", "INV-001"]


class TestOversizedCustomValues:
    def test_preview_with_long_value(self, client):
        payload = {
            "items": [{"description": "Widget", "quantity": 1, "unit_price": 0,
                       "custom_fields": [{"name": "Shipping", "value": "9" * 29}]}],
            "custom_columns": [{"name": "Shipping", "type": "additive"}],
        }
        response = client.post("/api/invoices/preview", json=payload, headers=USER_HEADERS)
        assert response.status_code == 200
        assert Decimal(response.json()["totals"]["subtotal"]) == Decimal("9" * 29)

    def test_huge_exponent_keeps_invoice_list_usable(self, client, customer):
        items = [{"description": "Widget", "quantity": 2, "unit_price": 50,
                  "custom_fields": [{"name": "Shipping", "value": "1e1000000"}]}]
        create_invoice(client, customer, items=items, discount=0)

        response = client.get("/api/invoices", headers=USER_HEADERS)
        assert response.status_code == 200
        assert response.json()[0]["formatted_total"] == "$100.00"
        assert client.get("/api/dashboard", headers=USER_HEADERS).status_code == 200

    def test_out_of_range_quantity_rejected(self, client, customer):
        items = [{"description": "Widget", "quantity": "1e1000", "unit_price": 1}]
        response = client.post("/api/invoices", json=invoice_payload(customer["id"], items=items), headers=USER_HEADERS)
        assert response.status_code == 400
        assert client.get("/api/invoices", headers=USER_HEADERS).json() == []


class TestStoredMoney:
    def test_discount_and_payments_kept_exactly(self, client, customer):
        invoice = create_invoice(client, customer, discount="0.123456")
        client.post(f"/api/invoices/{invoice['id']}/payments", json={"amount": "0.00001"}, headers=USER_HEADERS)

        stored = client.get(f"/api/invoices/{invoice['id']}", headers=USER_HEADERS).json()
        assert Decimal(stored["discount"]) == Decimal("0.123456")
        assert Decimal(stored["total_paid"]) == Decimal("0.00001")
        assert Decimal(stored["total_amount"]) == Decimal("139.876544")
        assert Decimal(stored["totals"]["amount_due"]) == Decimal("139.876534")


class TestFailedSave:
    def test_update_rolled_back_and_reported(self, client, customer, monkeypatch):
        invoice = create_invoice(client, customer)
        rollbacks = []
        real_rollback = Session.rollback

        def failing_commit(session):
            raise OperationalError("UPDATE invoices", {}, Exception("database is locked"))

        def recording_rollback(session):
            rollbacks.append(session)
            real_rollback(session)

        monkeypatch.setattr(Session, "commit", failing_commit)
        monkeypatch.setattr(Session, "rollback", recording_rollback)
        response = client.put(f"/api/invoices/{invoice['id']}", json={"discount": 0, "notes": "changed"}, headers=USER_HEADERS)
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to save invoice."}
        assert rollbacks

        stored = client.get(f"/api/invoices/{invoice['id']}", headers=USER_HEADERS).json()
        assert Decimal(stored["total_amount"]) == Decimal("135")
        assert Decimal(stored["discount"]) == Decimal("5")
        assert stored["notes"] is None

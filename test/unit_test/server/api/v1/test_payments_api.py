import pytest
import pytest_asyncio
from httpx import AsyncClient

from bizboard.server.core.config import settings

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def supplier(seed, business):
    return await seed.supplier(business, name="תנובה")


def payment_payload(business, supplier, amount, method="bank_transfer", **values):
    payload = {
        "business_id": business.id,
        "supplier_id": supplier.id,
        "payment_date": "2026-03-15",
        "methods": [{"method": method, "amount": amount}],
    }
    payload.update(values)
    return payload


async def create_payment(client, headers, payload):
    response = await client.post("/api/v1/payments", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def invoice_status(client, headers, invoice_id):
    return (await client.get(f"/api/v1/invoices/{invoice_id}", headers=headers)).json()["status"]


class TestCreatePayment:
    async def test_installments_are_one_month_apart(self, client: AsyncClient, business, supplier, owner_headers):
        payload = payment_payload(business, supplier, 708)
        payload["methods"] = [{"method": "check", "amount": 708, "installments_count": 3, "check_number": "1001"}]

        data = await create_payment(client, owner_headers, payload)

        assert data["total_amount"] == 708
        assert [s["due_date"] for s in data["splits"]] == ["2026-03-15", "2026-04-15", "2026-05-15"]
        assert [s["amount"] for s in data["splits"]] == [236, 236, 236]
        assert {s["installments_count"] for s in data["splits"]} == {3}
        assert {s["check_number"] for s in data["splits"]} == {"1001"}

    async def test_invoices_fully_covered_are_paid(self, client: AsyncClient, seed, business, supplier, owner_headers):
        small = await seed.invoice(business, supplier, 100, vat_amount=0)
        large = await seed.invoice(business, supplier, 500, vat_amount=0)

        await create_payment(
            client, owner_headers, payment_payload(business, supplier, 300, invoice_ids=[large.id, small.id])
        )

        assert await invoice_status(client, owner_headers, small.id) == "paid"
        assert await invoice_status(client, owner_headers, large.id) == "pending"

    async def test_blank_method_is_other(self, client: AsyncClient, business, supplier, owner_headers):
        data = await create_payment(client, owner_headers, payment_payload(business, supplier, 50, method=" "))

        assert data["splits"][0]["payment_method"] == "other"

    async def test_missing_supplier(self, client: AsyncClient, business, owner_headers):
        response = await client.post(
            "/api/v1/payments",
            json={"business_id": business.id, "payment_date": "2026-03-15", "methods": [{"amount": 10}]},
            headers=owner_headers,
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "נא למלא את כל השדות הנדרשים"

    async def test_zero_amount(self, client: AsyncClient, business, supplier, owner_headers):
        response = await client.post(
            "/api/v1/payments", json=payment_payload(business, supplier, 0), headers=owner_headers
        )

        assert response.status_code == 422

    async def test_unknown_method(self, client: AsyncClient, business, supplier, owner_headers):
        response = await client.post(
            "/api/v1/payments", json=payment_payload(business, supplier, 10, method="barter"), headers=owner_headers
        )

        assert response.status_code == 422

    async def test_custom_installments_must_match_amount(self, client: AsyncClient, business, supplier, owner_headers):
        payload = payment_payload(business, supplier, 300)
        payload["methods"][0]["installments"] = [
            {"number": 1, "due_date": "2026-03-15", "amount": 100},
            {"number": 2, "due_date": "2026-04-15", "amount": 100},
        ]

        response = await client.post("/api/v1/payments", json=payload, headers=owner_headers)

        assert response.status_code == 422


class TestLedger:
    async def test_pages(self, client: AsyncClient, business, supplier, owner_headers, monkeypatch):
        monkeypatch.setattr(settings, "payments_page_size", 1)
        first = await create_payment(client, owner_headers, payment_payload(business, supplier, 100, payment_date="2026-03-01"))
        second = await create_payment(client, owner_headers, payment_payload(business, supplier, 200, payment_date="2026-03-02"))

        page = (await client.get("/api/v1/payments", params={"business_id": business.id}, headers=owner_headers)).json()
        assert [item["id"] for item in page["items"]] == [second["id"]]
        assert page["has_more"] is True

        page = (
            await client.get("/api/v1/payments", params={"business_id": business.id, "offset": 1}, headers=owner_headers)
        ).json()
        assert [item["id"] for item in page["items"]] == [first["id"]]
        assert page["has_more"] is False

    async def test_display_fields(self, client: AsyncClient, business, supplier, owner_headers):
        await create_payment(client, owner_headers, payment_payload(business, supplier, 118))

        page = (await client.get("/api/v1/payments", params={"business_id": business.id}, headers=owner_headers)).json()

        [item] = page["items"]
        assert item["date_label"] == "15/03/26"
        assert item["supplier_name"] == "תנובה"
        assert item["method_name"] == "העברה בנקאית"
        assert item["installments_label"] == "1/1"
        assert item["subtotal"] == 100
        assert item["vat_amount"] == 18

    async def test_summary_per_method(self, client: AsyncClient, business, supplier, owner_headers):
        await create_payment(client, owner_headers, payment_payload(business, supplier, 100, method="cash"))
        await create_payment(client, owner_headers, payment_payload(business, supplier, 300))

        response = await client.get("/api/v1/payments/summary", params={"business_id": business.id}, headers=owner_headers)

        data = response.json()
        assert data["total"] == 400
        assert [m["method"] for m in data["methods"]] == ["bank_transfer", "cash"]
        assert data["methods"][0]["percentage"] == 75
        assert data["methods"][0]["suppliers"][0]["supplier_name"] == "תנובה"


class TestSchedule:
    async def test_forecast_and_past(self, client: AsyncClient, business, supplier, owner_headers):
        payload = payment_payload(business, supplier, 400)
        payload["methods"][0]["installments_count"] = 4
        await create_payment(client, owner_headers, payload)
        params = {"business_id": business.id, "as_of": "2026-04-01"}

        forecast = (await client.get("/api/v1/payments/forecast", params=params, headers=owner_headers)).json()
        past = (await client.get("/api/v1/payments/past", params=params, headers=owner_headers)).json()

        assert [m["key"] for m in forecast["months"]] == ["2026-04", "2026-05", "2026-06"]
        assert forecast["total"] == 300
        assert forecast["months"][0]["items"][0]["installments_label"] == "2/4"
        [commitment] = forecast["commitments"]
        assert commitment["monthly_amount"] == 100
        assert commitment["remaining_count"] == 3
        assert commitment["last_due_date"] == "2026-06-15"

        assert [m["key"] for m in past["months"]] == ["2026-03"]
        assert past["months"][0]["label"] == "מרץ, 2026"


class TestEditPayment:
    async def test_unlinked_invoice_reverts_to_pending(self, client: AsyncClient, seed, business, supplier, owner_headers):
        invoice = await seed.invoice(business, supplier, 100, vat_amount=0)
        payment = await create_payment(
            client, owner_headers, payment_payload(business, supplier, 100, invoice_ids=[invoice.id])
        )
        assert await invoice_status(client, owner_headers, invoice.id) == "paid"

        response = await client.put(
            f"/api/v1/payments/{payment['id']}",
            json={"methods": [{"method": "cash", "amount": 150}], "invoice_ids": []},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["total_amount"] == 150
        assert [s["payment_method"] for s in response.json()["splits"]] == ["cash"]
        assert await invoice_status(client, owner_headers, invoice.id) == "pending"

    async def test_delete(self, client: AsyncClient, seed, business, supplier, owner_headers):
        invoice = await seed.invoice(business, supplier, 100, vat_amount=0)
        payment = await create_payment(
            client, owner_headers, payment_payload(business, supplier, 100, invoice_ids=[invoice.id])
        )

        response = await client.delete(f"/api/v1/payments/{payment['id']}", headers=owner_headers)

        assert response.status_code == 204
        assert (await client.get(f"/api/v1/payments/{payment['id']}", headers=owner_headers)).status_code == 404
        assert await invoice_status(client, owner_headers, invoice.id) == "pending"

    async def test_outsider(self, client: AsyncClient, business, supplier, owner_headers, outsider_headers):
        payment = await create_payment(client, owner_headers, payment_payload(business, supplier, 100))

        response = await client.get(f"/api/v1/payments/{payment['id']}", headers=outsider_headers)

        assert response.status_code == 403

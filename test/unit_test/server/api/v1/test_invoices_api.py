from datetime import date

import pytest
import pytest_asyncio
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def supplier(seed, business):
    return await seed.supplier(business, name="תנובה")


def invoice_payload(business, supplier, **values):
    payload = {"business_id": business.id, "supplier_id": supplier.id, "invoice_date": "2026-03-10", "subtotal": 1000}
    payload.update(values)
    return payload


class TestCreateInvoice:
    async def test_vat_derived_from_business_rate(self, client: AsyncClient, business, supplier, owner, owner_headers):
        response = await client.post("/api/v1/invoices", json=invoice_payload(business, supplier), headers=owner_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["vat_amount"] == 180.0
        assert data["total_amount"] == 1180.0
        assert data["status"] == "pending"
        assert data["created_by"] == owner.id

    async def test_supplier_without_vat(self, client: AsyncClient, seed, business, owner_headers):
        exempt = await seed.supplier(business, name="עירייה", vat_type="none")

        response = await client.post("/api/v1/invoices", json=invoice_payload(business, exempt), headers=owner_headers)

        assert response.json()["vat_amount"] == 0.0
        assert response.json()["total_amount"] == 1000.0

    async def test_explicit_partial_vat(self, client: AsyncClient, business, supplier, owner_headers):
        response = await client.post(
            "/api/v1/invoices", json=invoice_payload(business, supplier, vat_amount=55.5), headers=owner_headers
        )

        assert response.json()["vat_amount"] == 55.5
        assert response.json()["total_amount"] == 1055.5

    async def test_inactive_business(self, client: AsyncClient, seed, owner, owner_headers):
        closed = await seed.business(name="סגור", status="inactive")
        await seed.member(closed, owner)
        supplier = await seed.supplier(closed)

        response = await client.post("/api/v1/invoices", json=invoice_payload(closed, supplier), headers=owner_headers)

        assert response.status_code == 409
        assert response.json()["detail"] == "לא ניתן להוסיף הוצאות לעסק לא פעיל"

    async def test_supplier_of_other_business(self, client: AsyncClient, seed, business, owner_headers):
        other = await seed.business(name="אחר")
        foreign = await seed.supplier(other)

        response = await client.post("/api/v1/invoices", json=invoice_payload(business, foreign), headers=owner_headers)

        assert response.status_code == 422


class TestInvoiceQueries:
    async def test_list_filters_by_date(self, client: AsyncClient, seed, business, supplier, owner_headers):
        await seed.invoice(business, supplier, 100, invoice_date=date(2026, 2, 28))
        march = await seed.invoice(business, supplier, 200, invoice_date=date(2026, 3, 1))

        response = await client.get(
            "/api/v1/invoices",
            params={"business_id": business.id, "start": "2026-03-01", "end": "2026-03-31"},
            headers=owner_headers,
        )

        assert [i["id"] for i in response.json()] == [march.id]

    async def test_update_recomputes_totals(self, client: AsyncClient, seed, business, supplier, owner_headers):
        invoice = await seed.invoice(business, supplier, 100)

        response = await client.patch(f"/api/v1/invoices/{invoice.id}", json={"subtotal": 200}, headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["vat_amount"] == 36.0
        assert response.json()["total_amount"] == 236.0

    async def test_update_keeps_partial_vat(self, client: AsyncClient, seed, business, owner_headers):
        mixed = await seed.supplier(business, name="דלק", vat_type="partial")
        invoice = await seed.invoice(business, mixed, 100, vat_amount=12.0)

        response = await client.patch(f"/api/v1/invoices/{invoice.id}", json={"subtotal": 200}, headers=owner_headers)

        assert response.json()["vat_amount"] == 12.0
        assert response.json()["total_amount"] == 212.0

    async def test_delete(self, client: AsyncClient, seed, business, supplier, owner_headers):
        invoice = await seed.invoice(business, supplier, 100)

        assert (await client.delete(f"/api/v1/invoices/{invoice.id}", headers=owner_headers)).status_code == 204
        assert (await client.get(f"/api/v1/invoices/{invoice.id}", headers=owner_headers)).status_code == 404

    async def test_outsider_cannot_read(self, client: AsyncClient, seed, business, supplier, outsider_headers):
        invoice = await seed.invoice(business, supplier, 100)

        response = await client.get(f"/api/v1/invoices/{invoice.id}", headers=outsider_headers)

        assert response.status_code == 403

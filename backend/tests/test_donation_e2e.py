"""Donate-to-thank-you journeys through the public API."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.helpers import seed_category, signed_callback

pytestmark = pytest.mark.payments

ASHA = {
    "amount": 501,
    "name": "Asha",
    "email": "a@x.com",
    "phone": "9876543210",
}


async def _third_category(db: AsyncSession) -> int:
    for name in ("Gau Seva", "Temple Construction", "Annadanam"):
        category = await seed_category(db, name=name)
    assert category.id == 3
    return category.id


async def test_successful_donation_journey(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category_id = await _third_category(db)

    initiated = await client.post(
        "/api/v1/payments/initiate", json={**ASHA, "category_id": category_id}
    )
    assert initiated.status_code == 201
    params = initiated.json()["params"]
    assert params["amount"] == "501"
    assert len(params["hash"]) == 128

    callback = await client.post("/api/v1/payments/success", data=signed_callback(params))
    assert callback.status_code == 303

    details = await client.get(f"/api/v1/donation/{params['txnid']}")
    body = details.json()
    assert body["donation"]["status"] == "completed"
    assert body["type"] == "category"
    assert body["category"]["id"] == 3
    assert body["event"] is None
    assert len(sent_emails["receipts"]) == 1


async def test_failed_donation_journey(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category_id = await _third_category(db)

    initiated = await client.post(
        "/api/v1/payments/initiate", json={**ASHA, "category_id": category_id}
    )
    params = initiated.json()["params"]

    callback = await client.post(
        "/api/v1/payments/failure", data=signed_callback(params, status="failure")
    )
    assert callback.status_code == 303

    details = await client.get(f"/api/v1/donation/{params['txnid']}")
    assert details.json()["donation"]["status"] == "failed"
    assert details.json()["donation"]["invoice_number"] is None
    assert sent_emails["receipts"] == []

    receipt = await client.get(f"/api/v1/payments/receipt/{params['txnid']}")
    assert receipt.status_code == 409

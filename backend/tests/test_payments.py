"""Donation payment flow: initiate, gateway callbacks, verify and receipts."""

import json
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.config import settings
from templecms.models.donation import Donation
from templecms.services import payu
from tests.helpers import (
    DONOR,
    admin_headers,
    auth_headers,
    create_user,
    initiate,
    seed_card,
    seed_category,
    seed_event,
    seed_event_card,
    signed_callback,
)

pytestmark = pytest.mark.payments


async def _donation(db: AsyncSession, txnid: str) -> Donation:
    db.expire_all()
    result = await db.execute(select(Donation).where(Donation.payment_id == txnid))
    return result.scalar_one()


def _redirect_query(resp: httpx.Response) -> tuple[str, dict[str, list[str]]]:
    location = urlparse(resp.headers["location"])
    return location.path, parse_qs(location.query, keep_blank_values=True)


# ---------------------------------------------------------------------------
# Initiate
# ---------------------------------------------------------------------------


async def test_initiate_creates_single_pending_donation(client: AsyncClient, db: AsyncSession):
    category = await seed_category(db)

    data = await initiate(client, category_id=category.id)

    assert data["txnid"].startswith("TXN")
    assert data["payment_url"] == settings.payu_payment_url
    params = data["params"]
    assert params["amount"] == "501"
    assert params["productinfo"] == "Annadanam"
    assert params["firstname"] == DONOR["name"]
    assert params["surl"] == "http://test/api/v1/payments/success"
    assert params["furl"] == "http://test/api/v1/payments/failure"
    assert params["hash"] == payu.request_hash(params)

    count = await db.execute(select(func.count(Donation.id)))
    assert count.scalar_one() == 1
    donation = await _donation(db, data["txnid"])
    assert donation.status == "pending"
    assert donation.amount == 501
    assert donation.category_id == category.id
    assert donation.user_id is None
    assert donation.invoice_number is None
    assert params["udf1"] == str(donation.id)


async def test_initiate_links_signed_in_donor(client: AsyncClient, db: AsyncSession):
    category = await seed_category(db)
    user = await create_user(db)

    data = await initiate(client, headers=auth_headers(user), category_id=category.id)

    donation = await _donation(db, data["txnid"])
    assert donation.user_id == user.id


async def test_initiate_rejects_bad_token(client: AsyncClient, db: AsyncSession):
    category = await seed_category(db)
    resp = await client.post(
        "/api/v1/payments/initiate",
        json={**DONOR, "amount": 501, "category_id": category.id},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert resp.status_code == 401


async def test_initiate_card_implies_category(client: AsyncClient, db: AsyncSession):
    category = await seed_category(db)
    card = await seed_card(db, category, amount=1100)

    data = await initiate(client, amount=1100, card_id=card.id)

    donation = await _donation(db, data["txnid"])
    assert donation.card_id == card.id
    assert donation.category_id == category.id
    assert data["params"]["productinfo"] == "Annadanam"


async def test_initiate_event_card_uses_event_title(client: AsyncClient, db: AsyncSession):
    event = await seed_event(db)
    card = await seed_event_card(db, event)

    data = await initiate(client, amount=2100, event_card_id=card.id)

    donation = await _donation(db, data["txnid"])
    assert donation.event_id == event.id
    assert donation.event_card_id == card.id
    assert data["params"]["productinfo"] == "Janmashtami Utsav"


async def test_initiate_uppercases_pan(client: AsyncClient, db: AsyncSession):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id, pan_card="abcde1234f")
    donation = await _donation(db, data["txnid"])
    assert donation.pan_card == "ABCDE1234F"


@pytest.mark.parametrize(
    "overrides",
    [
        {"amount": 0},
        {"amount": 500001},
        {"name": " A "},
        {"phone": "12345"},
        {"email": "not-an-email"},
        {"pan_card": "ABC123"},
        {"category_id": None},
    ],
)
async def test_initiate_validation_errors(
    client: AsyncClient, db: AsyncSession, overrides: dict
):
    category = await seed_category(db)
    body = {**DONOR, "amount": 501, "category_id": category.id, **overrides}
    resp = await client.post("/api/v1/payments/initiate", json=body)
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith("application/problem+json")

    count = await db.execute(select(func.count(Donation.id)))
    assert count.scalar_one() == 0


async def test_initiate_rejects_category_and_event_together(
    client: AsyncClient, db: AsyncSession
):
    category = await seed_category(db)
    event = await seed_event(db)
    resp = await client.post(
        "/api/v1/payments/initiate",
        json={**DONOR, "amount": 501, "category_id": category.id, "event_id": event.id},
    )
    assert resp.status_code == 422


async def test_initiate_rejects_inactive_category(client: AsyncClient, db: AsyncSession):
    category = await seed_category(db, is_active=False)
    resp = await client.post(
        "/api/v1/payments/initiate",
        json={**DONOR, "amount": 501, "category_id": category.id},
    )
    assert resp.status_code == 422
    assert resp.json()["title"] == "Invalid donation target"


async def test_initiate_rejects_card_from_other_category(client: AsyncClient, db: AsyncSession):
    first = await seed_category(db, name="Gau Seva")
    second = await seed_category(db, name="Temple Construction")
    card = await seed_card(db, first)
    resp = await client.post(
        "/api/v1/payments/initiate",
        json={**DONOR, "amount": 1100, "category_id": second.id, "card_id": card.id},
    )
    assert resp.status_code == 422


async def test_initiate_without_gateway_credentials(
    client: AsyncClient, db: AsyncSession, monkeypatch: pytest.MonkeyPatch
):
    category = await seed_category(db)
    monkeypatch.setattr(settings, "PAYU_MERCHANT_SALT", "")

    resp = await client.post(
        "/api/v1/payments/initiate",
        json={**DONOR, "amount": 501, "category_id": category.id},
    )
    assert resp.status_code == 503

    count = await db.execute(select(func.count(Donation.id)))
    assert count.scalar_one() == 0


# ---------------------------------------------------------------------------
# Checkout form
# ---------------------------------------------------------------------------


async def test_checkout_rebuilds_signed_form(client: AsyncClient, db: AsyncSession):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)

    resp = await client.get(f"/api/v1/payments/{data['txnid']}/checkout")
    assert resp.status_code == 200
    assert resp.json()["params"] == data["params"]


async def test_checkout_unknown_transaction(client: AsyncClient):
    resp = await client.get("/api/v1/payments/TXNDOESNOTEXIST/checkout")
    assert resp.status_code == 404


async def test_checkout_after_completion_conflicts(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    await client.post("/api/v1/payments/webhook", data=signed_callback(data["params"]))

    resp = await client.get(f"/api/v1/payments/{data['txnid']}/checkout")
    assert resp.status_code == 409


# ---------------------------------------------------------------------------
# Gateway callbacks
# ---------------------------------------------------------------------------


async def test_success_callback_completes_and_redirects(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id, pan_card="ABCDE1234F")

    resp = await client.post("/api/v1/payments/success", data=signed_callback(data["params"]))

    assert resp.status_code == 303
    path, query = _redirect_query(resp)
    assert path == "/donate/thank-you"
    assert query["txnid"] == [data["txnid"]]
    assert query["status"] == ["completed"]

    donation = await _donation(db, data["txnid"])
    assert donation.status == "completed"
    assert donation.invoice_number.startswith("INV-")
    assert donation.invoice_number.endswith(f"-{donation.id:06d}")
    assert donation.receipt_sent is True
    assert json.loads(donation.payment_gateway_response)["mihpayid"] == "403993715531077182"

    assert len(sent_emails["receipts"]) == 1
    receipt, pdf = sent_emails["receipts"][0]
    assert receipt.txnid == data["txnid"]
    assert receipt.pan_card == "ABCDE1234F"
    assert pdf.startswith(b"%PDF")


async def test_duplicate_callbacks_apply_once(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    callback = signed_callback(data["params"])

    first = await client.post("/api/v1/payments/webhook", data=callback)
    second = await client.post("/api/v1/payments/webhook", data=callback)
    redirect = await client.post("/api/v1/payments/success", data=callback)

    assert first.status_code == 200
    assert first.json() == {
        "txnid": data["txnid"],
        "status": "completed",
        "gateway_status": "success",
        "transitioned": True,
    }
    assert second.status_code == 200
    assert second.json()["transitioned"] is False
    assert second.json()["status"] == "completed"
    assert redirect.status_code == 303
    assert _redirect_query(redirect)[0] == "/donate/thank-you"

    assert len(sent_emails["receipts"]) == 1
    donation = await _donation(db, data["txnid"])
    assert donation.status == "completed"


async def test_failure_callback_marks_failed(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    callback = signed_callback(
        data["params"], status="failure", error_Message="Bank was unable to authenticate."
    )

    resp = await client.post("/api/v1/payments/failure", data=callback)

    assert resp.status_code == 303
    path, query = _redirect_query(resp)
    assert path == "/donate/payment-failed"
    assert query["txnid"] == [data["txnid"]]
    assert query["error"] == ["Bank was unable to authenticate."]

    donation = await _donation(db, data["txnid"])
    assert donation.status == "failed"
    assert donation.invoice_number is None
    assert donation.notification_sent is True
    assert sent_emails["receipts"] == []
    assert len(sent_emails["failures"]) == 1
    assert sent_emails["failures"][0]["reason"] == "Bank was unable to authenticate."


async def test_late_success_after_failure_is_ignored(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    await client.post(
        "/api/v1/payments/webhook", data=signed_callback(data["params"], status="failure")
    )

    resp = await client.post("/api/v1/payments/webhook", data=signed_callback(data["params"]))

    assert resp.status_code == 200
    assert resp.json()["status"] == "failed"
    assert resp.json()["transitioned"] is False
    donation = await _donation(db, data["txnid"])
    assert donation.status == "failed"
    assert sent_emails["receipts"] == []


async def test_tampered_callback_leaves_donation_pending(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    callback = signed_callback(data["params"])
    callback["amount"] = "1.00"

    webhook = await client.post("/api/v1/payments/webhook", data=callback)
    browser = await client.post("/api/v1/payments/success", data=callback)

    assert webhook.status_code == 400
    assert webhook.json()["type"] == "urn:temple:payments:signature-mismatch"
    assert browser.status_code == 303
    assert _redirect_query(browser)[1]["error"] == ["verification_failed"]

    donation = await _donation(db, data["txnid"])
    assert donation.status == "pending"
    assert donation.payment_gateway_response is None
    assert sent_emails["receipts"] == []


@pytest.mark.parametrize("bad_hash", ["é" * 128, "ü"])
async def test_non_ascii_hash_is_rejected_as_tampering(
    client: AsyncClient, db: AsyncSession, sent_emails: dict, bad_hash: str
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    callback = {**signed_callback(data["params"]), "hash": bad_hash}

    webhook = await client.post("/api/v1/payments/webhook", data=callback)
    browser = await client.post("/api/v1/payments/success", data=callback)

    assert webhook.status_code == 400
    assert webhook.json()["type"] == "urn:temple:payments:signature-mismatch"
    assert browser.status_code == 303
    path, query = _redirect_query(browser)
    assert path.endswith("/donate/payment-failed")
    assert query["error"] == ["verification_failed"]
    assert (await _donation(db, data["txnid"])).status == "pending"
    assert sent_emails["receipts"] == []


async def test_signed_amount_mismatch_is_rejected(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    # Correctly signed by someone holding the salt, but for a different amount
    callback = signed_callback({**data["params"], "amount": "1"})

    resp = await client.post("/api/v1/payments/webhook", data=callback)

    assert resp.status_code == 400
    assert (await _donation(db, data["txnid"])).status == "pending"


async def test_unknown_transaction_callback(client: AsyncClient, sent_emails: dict):
    params = {
        "key": settings.PAYU_MERCHANT_KEY,
        "txnid": "TXN0000000000000000",
        "amount": "501",
        "productinfo": "Annadanam",
        "firstname": "Nobody",
        "email": "nobody@example.com",
        "udf1": "1",
    }
    callback = signed_callback(params)

    webhook = await client.post("/api/v1/payments/webhook", data=callback)
    browser = await client.post("/api/v1/payments/success", data=callback)

    assert webhook.status_code == 404
    assert browser.status_code == 303
    assert _redirect_query(browser)[1]["error"] == ["unknown_transaction"]


async def test_malformed_callback_redirects(client: AsyncClient):
    resp = await client.post("/api/v1/payments/success", data={"status": "success"})
    assert resp.status_code == 303
    path, query = _redirect_query(resp)
    assert path == "/donate/payment-failed"
    assert query["error"] == ["invalid_callback"]


async def test_pending_gateway_status_is_not_terminal(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)

    resp = await client.post(
        "/api/v1/payments/webhook", data=signed_callback(data["params"], status="pending")
    )

    assert resp.status_code == 200
    assert resp.json()["transitioned"] is False
    assert (await _donation(db, data["txnid"])).status == "pending"


async def test_callback_with_additional_charges(
    client: AsyncClient, db: AsyncSession, sent_emails: dict
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)

    resp = await client.post(
        "/api/v1/payments/webhook",
        data=signed_callback(data["params"], additionalCharges="10.00"),
    )

    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"


# ---------------------------------------------------------------------------
# Gateway verify
# ---------------------------------------------------------------------------


def _mock_payu(monkeypatch: pytest.MonkeyPatch, details: dict, calls: list | None = None) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        txnid = parse_qs(request.content.decode())["var1"][0]
        return httpx.Response(
            200, json={"status": 1, "transaction_details": {txnid: details}}
        )

    monkeypatch.setattr(
        payu,
        "get_http_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


async def test_verify_settles_pending_donation(
    client: AsyncClient, db: AsyncSession, sent_emails: dict, monkeypatch: pytest.MonkeyPatch
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    calls: list[httpx.Request] = []
    _mock_payu(
        monkeypatch, {"status": "success", "amt": "501.00", "mihpayid": "777"}, calls
    )

    resp = await client.post(f"/api/v1/payments/{data['txnid']}/verify")

    assert resp.status_code == 200
    assert resp.json()["transitioned"] is True
    assert resp.json()["status"] == "completed"
    form = parse_qs(calls[0].content.decode())
    assert form["command"] == ["verify_payment"]
    assert form["key"] == [settings.PAYU_MERCHANT_KEY]

    donation = await _donation(db, data["txnid"])
    assert donation.status == "completed"
    assert json.loads(donation.payment_gateway_response)["source"] == "verify_payment"
    assert len(sent_emails["receipts"]) == 1


async def test_verify_skips_gateway_when_already_final(
    client: AsyncClient, db: AsyncSession, sent_emails: dict, monkeypatch: pytest.MonkeyPatch
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    await client.post("/api/v1/payments/webhook", data=signed_callback(data["params"]))
    calls: list[httpx.Request] = []
    _mock_payu(monkeypatch, {"status": "failure"}, calls)

    resp = await client.post(f"/api/v1/payments/{data['txnid']}/verify")

    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"
    assert calls == []


async def test_verify_gateway_down(
    client: AsyncClient, db: AsyncSession, monkeypatch: pytest.MonkeyPatch
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    monkeypatch.setattr(
        payu,
        "get_http_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    resp = await client.post(f"/api/v1/payments/{data['txnid']}/verify")

    assert resp.status_code == 502
    assert (await _donation(db, data["txnid"])).status == "pending"


async def test_admin_verify_by_donation_id(
    client: AsyncClient, db: AsyncSession, sent_emails: dict, monkeypatch: pytest.MonkeyPatch
):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    donation = await _donation(db, data["txnid"])
    _mock_payu(monkeypatch, {"status": "failure", "amt": "501.00"})

    resp = await client.post(
        f"/api/v1/admin/donations/{donation.id}/verify", headers=await admin_headers(db)
    )

    assert resp.status_code == 200
    assert resp.json()["status"] == "failed"
    assert len(sent_emails["failures"]) == 1


# ---------------------------------------------------------------------------
# Lookup and receipts
# ---------------------------------------------------------------------------


async def test_get_donation_by_txnid_category(client: AsyncClient, db: AsyncSession):
    category = await seed_category(db)
    card = await seed_card(db, category)
    user = await create_user(db)
    data = await initiate(client, headers=auth_headers(user), amount=1100, card_id=card.id)

    resp = await client.get(f"/api/v1/donation/{data['txnid']}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["type"] == "category"
    assert body["category"]["id"] == category.id
    assert body["event"] is None
    assert body["card"]["id"] == card.id
    assert body["user"]["id"] == user.id
    assert body["donation"]["payment_id"] == data["txnid"]
    assert "payment_gateway_response" not in body["donation"]


async def test_get_donation_by_txnid_event(client: AsyncClient, db: AsyncSession):
    event = await seed_event(db)
    card = await seed_event_card(db, event)
    data = await initiate(client, amount=2100, event_card_id=card.id)

    body = (await client.get(f"/api/v1/donation/{data['txnid']}")).json()

    assert body["type"] == "event"
    assert body["event"]["title"] == "Janmashtami Utsav"
    assert body["card"]["event_id"] == event.id
    assert body["user"] is None


async def test_get_donation_unknown(client: AsyncClient):
    resp = await client.get("/api/v1/donation/TXNMISSING")
    assert resp.status_code == 404
    assert resp.json()["status"] == 404


async def test_receipt_requires_completed_donation(client: AsyncClient, db: AsyncSession):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)

    pdf = await client.get(f"/api/v1/payments/receipt/{data['txnid']}")
    resend = await client.post("/api/v1/payments/send-receipt", json={"txnid": data["txnid"]})

    assert pdf.status_code == 409
    assert resend.status_code == 409


async def test_receipt_pdf_download(client: AsyncClient, db: AsyncSession, sent_emails: dict):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    await client.post("/api/v1/payments/webhook", data=signed_callback(data["params"]))
    donation = await _donation(db, data["txnid"])

    resp = await client.get(f"/api/v1/payments/receipt/{data['txnid']}")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert donation.invoice_number in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")


async def test_send_receipt_resends(client: AsyncClient, db: AsyncSession, sent_emails: dict):
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)
    await client.post("/api/v1/payments/webhook", data=signed_callback(data["params"]))

    resp = await client.post("/api/v1/payments/send-receipt", json={"txnid": data["txnid"]})

    assert resp.status_code == 200
    assert resp.json() == {"txnid": data["txnid"], "sent": True}
    assert len(sent_emails["receipts"]) == 2


async def test_receipt_email_failure_does_not_undo_completion(
    client: AsyncClient, db: AsyncSession, monkeypatch: pytest.MonkeyPatch
):
    from templecms.services import receipts

    monkeypatch.setattr(receipts, "send_receipt_email", lambda receipt, pdf: False)
    category = await seed_category(db)
    data = await initiate(client, category_id=category.id)

    resp = await client.post("/api/v1/payments/webhook", data=signed_callback(data["params"]))

    assert resp.status_code == 200
    donation = await _donation(db, data["txnid"])
    assert donation.status == "completed"
    assert donation.receipt_sent is False


# ---------------------------------------------------------------------------
# Donor history
# ---------------------------------------------------------------------------


async def test_my_donations_lists_only_own(client: AsyncClient, db: AsyncSession):
    category = await seed_category(db)
    donor = await create_user(db)
    other = await create_user(db)
    mine = await initiate(client, headers=auth_headers(donor), category_id=category.id)
    await initiate(client, headers=auth_headers(other), category_id=category.id)
    await initiate(client, category_id=category.id)

    resp = await client.get("/api/v1/users/me/donations", headers=auth_headers(donor))

    assert resp.status_code == 200
    assert [d["payment_id"] for d in resp.json()] == [mine["txnid"]]

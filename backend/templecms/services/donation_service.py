"""Donation orchestration: initiate, reconcile, gateway verify and lookup.

A donation row is written as ``pending`` by :func:`initiate` and leaves that
state at most once, through the conditional update in :func:`_apply_outcome`.
That single ``UPDATE ... WHERE status = 'pending'`` is the only serialization
between concurrent callbacks for the same transaction.
"""

import json
import logging
import secrets
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from templecms.core.config import settings
from templecms.core.exceptions import (
    DonationNotFoundError,
    DonationNotPendingError,
    InvalidDonationTargetError,
    ReceiptUnavailableError,
    SignatureMismatchError,
)
from templecms.models.donation import Donation
from templecms.models.donation_category import DonationCard, DonationCategory
from templecms.models.event import Event, EventDonationCard
from templecms.models.user import User
from templecms.schemas.donation import (
    DonationDetails,
    DonationIntake,
    GatewayCallback,
    GatewayParams,
    InitiateResponse,
    ReconcileResult,
)
from templecms.services import payu, receipts

logger = logging.getLogger(__name__)

# Gateway status -> donation status. Anything not listed leaves the row pending.
GATEWAY_STATUS_MAP = {
    "success": "completed",
    "failure": "failed",
    "failed": "failed",
    "usercancelled": "failed",
    "cancelled": "failed",
    "dropped": "failed",
    "bounced": "failed",
}


def new_txnid() -> str:
    return f"TXN{secrets.token_hex(8).upper()}"


def map_gateway_status(status: str) -> str | None:
    return GATEWAY_STATUS_MAP.get(status.strip().lower())


def describe_purpose(category: DonationCategory | None, event: Event | None) -> str:
    if category is not None:
        return category.name
    if event is not None:
        return event.title
    return f"{settings.ORG_NAME} Donation"


@dataclass
class DonationTarget:
    category: DonationCategory | None = None
    event: Event | None = None
    card: DonationCard | None = None
    event_card: EventDonationCard | None = None

    @property
    def purpose(self) -> str:
        return describe_purpose(self.category, self.event)


async def resolve_target(db: AsyncSession, intake: DonationIntake) -> DonationTarget:
    """Load the referenced category/event/card; cards imply their parent."""
    target = DonationTarget()
    category_id = intake.category_id
    event_id = intake.event_id

    if intake.card_id is not None:
        card = await db.get(DonationCard, intake.card_id)
        if card is None or not card.is_active:
            raise InvalidDonationTargetError(f"Donation card {intake.card_id} is not available")
        if category_id is not None and category_id != card.category_id:
            raise InvalidDonationTargetError(
                f"Donation card {card.id} does not belong to category {category_id}"
            )
        target.card = card
        category_id = card.category_id

    if intake.event_card_id is not None:
        event_card = await db.get(EventDonationCard, intake.event_card_id)
        if event_card is None or not event_card.is_active:
            raise InvalidDonationTargetError(
                f"Event donation card {intake.event_card_id} is not available"
            )
        if event_id is not None and event_id != event_card.event_id:
            raise InvalidDonationTargetError(
                f"Event donation card {event_card.id} does not belong to event {event_id}"
            )
        target.event_card = event_card
        event_id = event_card.event_id

    if category_id is not None:
        category = await db.get(DonationCategory, category_id)
        if category is None or not category.is_active:
            raise InvalidDonationTargetError(f"Donation category {category_id} is not available")
        target.category = category

    if event_id is not None:
        event = await db.get(Event, event_id)
        if event is None or not event.is_active:
            raise InvalidDonationTargetError(f"Event {event_id} is not available")
        target.event = event

    return target


async def purpose_for(db: AsyncSession, donation: Donation) -> str:
    category = None
    event = None
    if donation.category_id:
        category = await db.get(DonationCategory, donation.category_id)
    if donation.event_id:
        event = await db.get(Event, donation.event_id)
    return describe_purpose(category, event)


def _callback_urls(base_url: str) -> tuple[str, str]:
    root = f"{base_url.rstrip('/')}{settings.API_V1_PREFIX}/payments"
    return f"{root}/success", f"{root}/failure"


def _gateway_params(donation: Donation, purpose: str, base_url: str) -> GatewayParams:
    surl, furl = _callback_urls(base_url)
    params = payu.build_payment_params(
        txnid=donation.payment_id,
        amount=donation.amount,
        productinfo=purpose,
        firstname=donation.name,
        email=donation.email,
        phone=donation.phone,
        udf1=str(donation.id),
        surl=surl,
        furl=furl,
    )
    return GatewayParams(**params)


async def get_donation(db: AsyncSession, txnid: str) -> Donation:
    result = await db.execute(select(Donation).where(Donation.payment_id == txnid))
    donation = result.scalar_one_or_none()
    if donation is None:
        raise DonationNotFoundError(txnid)
    return donation


async def initiate(
    db: AsyncSession,
    intake: DonationIntake,
    user: User | None,
    base_url: str,
) -> InitiateResponse:
    """Write one pending donation and return the signed checkout form."""
    payu.require_configured()
    target = await resolve_target(db, intake)

    donation = Donation(
        user_id=user.id if user is not None else None,
        category_id=target.category.id if target.category else None,
        event_id=target.event.id if target.event else None,
        card_id=target.card.id if target.card else None,
        event_card_id=target.event_card.id if target.event_card else None,
        amount=intake.amount,
        name=intake.name,
        email=str(intake.email),
        phone=intake.phone,
        address=intake.address,
        pan_card=intake.pan_card,
        message=intake.message,
        payment_id=new_txnid(),
        status="pending",
    )
    db.add(donation)
    await db.flush()
    await db.refresh(donation)

    params = _gateway_params(donation, target.purpose, base_url)
    logger.info(
        "Initiated donation %s (id=%s, amount=%s, purpose=%r)",
        donation.payment_id,
        donation.id,
        donation.amount,
        target.purpose,
    )
    return InitiateResponse(
        txnid=donation.payment_id,
        payment_url=settings.payu_payment_url,
        params=params,
    )


async def checkout_params(db: AsyncSession, txnid: str, base_url: str) -> InitiateResponse:
    """Rebuild the checkout form for a pending donation (redirect page)."""
    donation = await get_donation(db, txnid)
    if donation.status != "pending":
        raise DonationNotPendingError(txnid, donation.status)
    purpose = await purpose_for(db, donation)
    return InitiateResponse(
        txnid=txnid,
        payment_url=settings.payu_payment_url,
        params=_gateway_params(donation, purpose, base_url),
    )


def _callback_fields(callback: GatewayCallback) -> dict[str, str]:
    fields = callback.model_dump(by_alias=True, exclude_none=True)
    return {k: str(v) for k, v in fields.items()}


async def reconcile(db: AsyncSession, callback: GatewayCallback) -> ReconcileResult:
    """Apply a signed gateway outcome to its donation.

    Raises DonationNotFoundError for an unknown txnid and SignatureMismatchError
    when the hash or amount does not check out; the donation is not touched in
    either case.
    """
    payu.require_configured()
    txnid = callback.txnid
    result = await db.execute(select(Donation).where(Donation.payment_id == txnid))
    donation = result.scalar_one_or_none()
    if donation is None:
        logger.warning("Gateway callback for unknown transaction %s", txnid)
        raise DonationNotFoundError(txnid)

    fields = _callback_fields(callback)
    if not payu.verify_response_hash(fields):
        logger.warning(
            "Rejected gateway callback for %s: hash mismatch (possible tampering)", txnid
        )
        raise SignatureMismatchError(txnid)
    if not payu.amounts_match(callback.amount, donation.amount):
        logger.warning(
            "Rejected gateway callback for %s: amount %r does not match %s",
            txnid,
            callback.amount,
            donation.amount,
        )
        raise SignatureMismatchError(txnid, "amount mismatch")

    new_status = map_gateway_status(callback.status)
    if new_status is None:
        logger.info(
            "Gateway reported %r for %s; leaving %s", callback.status, txnid, donation.status
        )
        return ReconcileResult(
            txnid=txnid,
            status=donation.status,
            gateway_status=callback.status,
            transitioned=False,
        )

    transitioned = await _apply_outcome(
        db, donation, new_status, fields, failure_reason=callback.error_message
    )
    return ReconcileResult(
        txnid=txnid,
        status=donation.status,
        gateway_status=callback.status,
        transitioned=transitioned,
    )


async def verify_with_gateway(db: AsyncSession, txnid: str) -> ReconcileResult:
    """Settle a pending donation from PayU's verify_payment answer."""
    donation = await get_donation(db, txnid)
    if donation.status != "pending":
        return ReconcileResult(
            txnid=txnid,
            status=donation.status,
            gateway_status=donation.status,
            transitioned=False,
        )

    verified = await payu.verify_transaction(txnid)
    new_status = map_gateway_status(verified.status)
    if new_status is None:
        return ReconcileResult(
            txnid=txnid,
            status=donation.status,
            gateway_status=verified.status,
            transitioned=False,
        )
    if verified.amount is not None and not payu.amounts_match(verified.amount, donation.amount):
        logger.warning(
            "PayU verify for %s reports amount %r, expected %s",
            txnid,
            verified.amount,
            donation.amount,
        )
        raise SignatureMismatchError(txnid, "verified amount mismatch")

    payload = {k: str(v) for k, v in verified.raw.items()}
    payload["source"] = "verify_payment"
    transitioned = await _apply_outcome(
        db, donation, new_status, payload, failure_reason=payload.get("error_Message")
    )
    return ReconcileResult(
        txnid=txnid,
        status=donation.status,
        gateway_status=verified.status,
        transitioned=transitioned,
    )


async def _apply_outcome(
    db: AsyncSession,
    donation: Donation,
    new_status: str,
    gateway_response: dict[str, str],
    failure_reason: str | None = None,
) -> bool:
    """Move a pending donation to ``new_status``. Returns True only for the
    call that performed the transition."""
    values: dict = {
        "status": new_status,
        "payment_gateway_response": json.dumps(gateway_response, sort_keys=True),
    }
    if new_status == "completed":
        values["invoice_number"] = receipts.invoice_number_for(donation.id)

    result = await db.execute(
        update(Donation)
        .where(Donation.payment_id == donation.payment_id, Donation.status == "pending")
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    await db.refresh(donation)

    if result.rowcount != 1:
        if donation.status == new_status:
            logger.info(
                "Donation %s already %s; duplicate callback ignored",
                donation.payment_id,
                new_status,
            )
        else:
            logger.warning(
                "Donation %s is %s; ignoring conflicting outcome %s",
                donation.payment_id,
                donation.status,
                new_status,
            )
        return False

    # Make the transition durable before any outbound email.
    await db.commit()
    logger.info("Donation %s marked %s", donation.payment_id, new_status)

    purpose = await purpose_for(db, donation)
    if new_status == "completed":
        if await deliver_receipt(donation, purpose):
            donation.receipt_sent = True
    else:
        delivered = await run_in_threadpool(
            lambda: receipts.send_failure_email(
                name=donation.name,
                email=donation.email,
                txnid=donation.payment_id,
                amount=donation.amount,
                purpose=purpose,
                reason=failure_reason,
            )
        )
        if delivered:
            donation.notification_sent = True
    await db.flush()
    return True


async def deliver_receipt(donation: Donation, purpose: str) -> bool:
    """Render and email the receipt. Failures are logged and reported as False."""
    receipt = receipts.build_receipt(donation, purpose)
    try:
        pdf = await run_in_threadpool(receipts.render_receipt_pdf, receipt)
    except Exception:
        logger.exception("Could not render receipt for %s", donation.payment_id)
        return False
    return await run_in_threadpool(receipts.send_receipt_email, receipt, pdf)


async def completed_donation(db: AsyncSession, txnid: str) -> Donation:
    donation = await get_donation(db, txnid)
    if donation.status != "completed":
        raise ReceiptUnavailableError(txnid, donation.status)
    return donation


async def receipt_pdf(db: AsyncSession, txnid: str) -> tuple[receipts.ReceiptData, bytes]:
    donation = await completed_donation(db, txnid)
    receipt = receipts.build_receipt(donation, await purpose_for(db, donation))
    pdf = await run_in_threadpool(receipts.render_receipt_pdf, receipt)
    return receipt, pdf


async def resend_receipt(db: AsyncSession, txnid: str) -> bool:
    donation = await completed_donation(db, txnid)
    sent = await deliver_receipt(donation, await purpose_for(db, donation))
    if sent and not donation.receipt_sent:
        donation.receipt_sent = True
        await db.flush()
    return sent


async def get_by_transaction_id(db: AsyncSession, txnid: str) -> DonationDetails:
    donation = await get_donation(db, txnid)

    user = await db.get(User, donation.user_id) if donation.user_id else None
    event = await db.get(Event, donation.event_id) if donation.event_id else None
    category = None
    if event is None and donation.category_id:
        category = await db.get(DonationCategory, donation.category_id)

    card: DonationCard | EventDonationCard | None = None
    if donation.event_card_id:
        card = await db.get(EventDonationCard, donation.event_card_id)
    elif donation.card_id:
        card = await db.get(DonationCard, donation.card_id)

    if event is not None:
        kind = "event"
    elif category is not None:
        kind = "category"
    else:
        kind = None

    return DonationDetails.model_validate(
        {
            "donation": donation,
            "user": user,
            "type": kind,
            "event": event,
            "category": category,
            "card": card,
        },
        from_attributes=True,
    )

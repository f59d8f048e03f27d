"""PayU donation endpoints: initiate, gateway callbacks, verify and receipts."""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse, Response
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.config import settings
from templecms.core.dependencies import get_base_url, get_db, get_optional_user
from templecms.core.exceptions import DonationNotFoundError, SignatureMismatchError
from templecms.models.user import User
from templecms.schemas.common import ErrorResponse
from templecms.schemas.donation import (
    DonationIntake,
    GatewayCallback,
    InitiateResponse,
    ReconcileResult,
    SendReceiptRequest,
    SendReceiptResponse,
)
from templecms.services import donation_service

logger = logging.getLogger(__name__)

router = APIRouter()

PROBLEM_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _frontend_redirect(path: str, **params: str) -> RedirectResponse:
    url = f"{settings.FRONTEND_URL.rstrip('/')}{path}?{urlencode(params)}"
    return RedirectResponse(url, status_code=303)


async def _callback_from_form(request: Request) -> GatewayCallback:
    form = await request.form()
    try:
        return GatewayCallback.model_validate({k: str(v) for k, v in form.items()})
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


@router.post(
    "/initiate",
    response_model=InitiateResponse,
    status_code=201,
    responses=PROBLEM_RESPONSES,
)
async def initiate_payment(
    body: DonationIntake,
    request: Request,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> InitiateResponse:
    """Create a pending donation and return the signed PayU form fields."""
    return await donation_service.initiate(db, body, user, get_base_url(request))


@router.get("/{txnid}/checkout", response_model=InitiateResponse, responses=PROBLEM_RESPONSES)
async def checkout(
    txnid: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> InitiateResponse:
    return await donation_service.checkout_params(db, txnid, get_base_url(request))


async def _browser_callback(request: Request, db: AsyncSession) -> RedirectResponse:
    """Reconcile a gateway post and send the donor's browser to the outcome page."""
    try:
        callback = await _callback_from_form(request)
    except RequestValidationError:
        logger.warning("Malformed gateway callback on %s", request.url.path)
        return _frontend_redirect("/donate/payment-failed", txnid="", error="invalid_callback")

    try:
        result = await donation_service.reconcile(db, callback)
    except DonationNotFoundError:
        return _frontend_redirect(
            "/donate/payment-failed", txnid=callback.txnid, error="unknown_transaction"
        )
    except SignatureMismatchError:
        return _frontend_redirect(
            "/donate/payment-failed", txnid=callback.txnid, error="verification_failed"
        )

    if result.status == "failed":
        return _frontend_redirect(
            "/donate/payment-failed",
            txnid=result.txnid,
            error=callback.error_message or result.gateway_status,
        )
    return _frontend_redirect("/donate/thank-you", txnid=result.txnid, status=result.status)


@router.post("/success", status_code=303, include_in_schema=False)
async def payment_success(request: Request, db: AsyncSession = Depends(get_db)):
    return await _browser_callback(request, db)


@router.post("/failure", status_code=303, include_in_schema=False)
async def payment_failure(request: Request, db: AsyncSession = Depends(get_db)):
    return await _browser_callback(request, db)


@router.post("/webhook", response_model=ReconcileResult, responses=PROBLEM_RESPONSES)
async def payment_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> ReconcileResult:
    """Server-to-server notification carrying the same signed fields."""
    callback = await _callback_from_form(request)
    return await donation_service.reconcile(db, callback)


@router.post("/{txnid}/verify", response_model=ReconcileResult, responses=PROBLEM_RESPONSES)
async def verify_payment(
    txnid: str,
    db: AsyncSession = Depends(get_db),
) -> ReconcileResult:
    """Poll PayU for a pending donation (used by the thank-you page)."""
    return await donation_service.verify_with_gateway(db, txnid)


@router.get("/receipt/{txnid}", responses=PROBLEM_RESPONSES)
async def download_receipt(
    txnid: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    receipt, pdf = await donation_service.receipt_pdf(db, txnid)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="receipt-{receipt.invoice_number}.pdf"'
        },
    )


@router.post("/send-receipt", response_model=SendReceiptResponse, responses=PROBLEM_RESPONSES)
async def send_receipt(
    body: SendReceiptRequest,
    db: AsyncSession = Depends(get_db),
) -> SendReceiptResponse:
    sent = await donation_service.resend_receipt(db, body.txnid)
    return SendReceiptResponse(txnid=body.txnid, sent=sent)

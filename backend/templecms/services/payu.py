"""PayU hosted-checkout hashing and the ``verify_payment`` web service.

Hash sequences (SHA-512, lower-case hex):

* request:  ``key|txnid|amount|productinfo|firstname|email|udf1..udf5||||||salt``
* response: ``[additionalCharges|]salt|status||||||udf5..udf1|email|firstname|
  productinfo|amount|txnid|key``
* verify:   ``key|verify_payment|txnid|salt``

The merchant salt never leaves this module.
"""

import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

import httpx

from templecms.core.config import settings
from templecms.core.exceptions import GatewayNotConfiguredError, GatewayUnavailableError

logger = logging.getLogger(__name__)

UDF_FIELDS = ("udf1", "udf2", "udf3", "udf4", "udf5")
REQUEST_HASH_FIELDS = ("key", "txnid", "amount", "productinfo", "firstname", "email", *UDF_FIELDS)

# PayU rejects productinfo/firstname containing the hash separator
_FORBIDDEN = str.maketrans({"|": " ", "\r": " ", "\n": " "})


def _sha512(sequence: str) -> str:
    return hashlib.sha512(sequence.encode("utf-8")).hexdigest()


def clean_field(value: str, max_length: int = 100) -> str:
    return value.translate(_FORBIDDEN).strip()[:max_length]


def format_amount(amount: int | Decimal) -> str:
    """Whole-rupee amounts go to PayU without decimals, e.g. ``"501"``."""
    return str(int(amount))


def require_configured() -> None:
    if not settings.payu_configured:
        raise GatewayNotConfiguredError()


def request_hash(fields: dict[str, str]) -> str:
    parts = [fields.get(name, "") for name in REQUEST_HASH_FIELDS]
    return _sha512("|".join(parts) + "||||||" + settings.PAYU_MERCHANT_SALT)


def response_hash(fields: dict[str, str]) -> str:
    parts = [
        settings.PAYU_MERCHANT_SALT,
        fields.get("status", ""),
        "",
        "",
        "",
        "",
        "",
        *(fields.get(name, "") for name in reversed(UDF_FIELDS)),
        fields.get("email", ""),
        fields.get("firstname", ""),
        fields.get("productinfo", ""),
        fields.get("amount", ""),
        fields.get("txnid", ""),
        settings.PAYU_MERCHANT_KEY,
    ]
    additional_charges = fields.get("additionalCharges")
    if additional_charges:
        parts.insert(0, additional_charges)
    return _sha512("|".join(parts))


def verify_response_hash(fields: dict[str, str]) -> bool:
    """Constant-time check of the hash PayU attached to a callback."""
    received = (fields.get("hash") or "").strip().lower()
    if not received:
        return False
    return hmac.compare_digest(response_hash(fields).encode(), received.encode("utf-8"))


def amounts_match(reported: str, expected: int) -> bool:
    try:
        return Decimal(reported) == Decimal(expected)
    except (InvalidOperation, TypeError):
        return False


def build_payment_params(
    *,
    txnid: str,
    amount: int,
    productinfo: str,
    firstname: str,
    email: str,
    phone: str,
    udf1: str,
    surl: str,
    furl: str,
) -> dict[str, str]:
    """Form fields for the hosted checkout page, including the request hash."""
    require_configured()
    params = {
        "key": settings.PAYU_MERCHANT_KEY,
        "txnid": txnid,
        "amount": format_amount(amount),
        "productinfo": clean_field(productinfo),
        "firstname": clean_field(firstname, 60),
        "email": email,
        "phone": phone,
        "udf1": udf1,
        "surl": surl,
        "furl": furl,
    }
    params["hash"] = request_hash(params)
    return params


@dataclass
class VerifiedTransaction:
    txnid: str
    status: str
    amount: str | None = None
    mihpayid: str | None = None
    raw: dict = field(default_factory=dict)


def get_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.PAYU_TIMEOUT_SECONDS)


async def verify_transaction(txnid: str) -> VerifiedTransaction:
    """Ask PayU for the authoritative status of one transaction."""
    require_configured()
    form = {
        "key": settings.PAYU_MERCHANT_KEY,
        "command": "verify_payment",
        "var1": txnid,
        "hash": _sha512(
            f"{settings.PAYU_MERCHANT_KEY}|verify_payment|{txnid}|{settings.PAYU_MERCHANT_SALT}"
        ),
    }
    try:
        async with get_http_client() as client:
            resp = await client.post(settings.payu_verify_url, data=form)
            resp.raise_for_status()
            body = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("PayU verify_payment failed for %s: %s", txnid, exc)
        raise GatewayUnavailableError(f"Could not verify transaction '{txnid}' with PayU") from exc

    details = (body.get("transaction_details") or {}).get(txnid) or {}
    status = str(details.get("status") or "not found").strip().lower()
    logger.info("PayU verify_payment %s -> %s", txnid, status)
    return VerifiedTransaction(
        txnid=txnid,
        status=status,
        amount=details.get("amt") or details.get("transaction_amount"),
        mihpayid=details.get("mihpayid"),
        raw=details,
    )

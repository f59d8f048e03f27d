"""RFC 7807 Problem Details error handling."""

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class ProblemDetailError(Exception):
    """Raise for RFC 7807 problem+json responses."""

    def __init__(
        self,
        status: int,
        title: str,
        detail: str,
        error_type: str | None = None,
    ):
        super().__init__(detail)
        self.status = status
        self.title = title
        self.detail = detail
        self.error_type = error_type or "about:blank"


class DonationNotFoundError(ProblemDetailError):
    def __init__(self, txnid: str):
        super().__init__(404, "Donation not found", f"No donation for transaction '{txnid}'")
        self.txnid = txnid


class SignatureMismatchError(ProblemDetailError):
    """Gateway payload failed hash verification; the donation is left untouched."""

    def __init__(self, txnid: str, reason: str = "hash mismatch"):
        super().__init__(
            400,
            "Signature verification failed",
            f"Gateway response for '{txnid}' rejected: {reason}",
            error_type="urn:temple:payments:signature-mismatch",
        )
        self.txnid = txnid


class GatewayNotConfiguredError(ProblemDetailError):
    def __init__(self) -> None:
        super().__init__(
            503,
            "Payment gateway not configured",
            "Online payments are unavailable. Please contact the temple office.",
        )


class GatewayUnavailableError(ProblemDetailError):
    def __init__(self, detail: str):
        super().__init__(502, "Payment gateway error", detail)


class ReceiptUnavailableError(ProblemDetailError):
    def __init__(self, txnid: str, status: str):
        super().__init__(
            409,
            "Receipt unavailable",
            f"Donation '{txnid}' is {status}; receipts exist only for completed donations",
        )


class InvalidDonationTargetError(ProblemDetailError):
    def __init__(self, detail: str):
        super().__init__(422, "Invalid donation target", detail)


class DonationNotPendingError(ProblemDetailError):
    def __init__(self, txnid: str, status: str):
        super().__init__(409, "Donation already processed", f"Donation '{txnid}' is {status}")


async def problem_detail_handler(request: Request, exc: ProblemDetailError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status,
        content={
            "type": exc.error_type,
            "title": exc.title,
            "status": exc.status,
            "detail": exc.detail,
            "instance": str(request.url.path),
        },
        media_type="application/problem+json",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "type": "about:blank",
            "title": exc.detail if isinstance(exc.detail, str) else "Error",
            "status": exc.status_code,
            "detail": exc.detail,
            "instance": str(request.url.path),
        },
        media_type="application/problem+json",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "type": "about:blank",
            "title": "Validation Error",
            "status": 422,
            "detail": jsonable_encoder(exc.errors()),
            "instance": str(request.url.path),
        },
        media_type="application/problem+json",
    )

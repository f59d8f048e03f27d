"""Public donation lookup used by the thank-you page."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.dependencies import get_db
from templecms.schemas.common import ErrorResponse
from templecms.schemas.donation import DonationDetails
from templecms.services import donation_service

router = APIRouter()


@router.get(
    "/donation/{txnid}",
    response_model=DonationDetails,
    responses={404: {"model": ErrorResponse}},
)
async def get_donation_by_txnid(
    txnid: str,
    db: AsyncSession = Depends(get_db),
) -> DonationDetails:
    return await donation_service.get_by_transaction_id(db, txnid)

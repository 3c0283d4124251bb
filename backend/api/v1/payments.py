from fastapi import APIRouter, Depends
from api.dependencies import get_payment_service
from services.payment_service import PaymentOrderService
from utils.responses import no_store_json

router = APIRouter()

@router.post("/payments/razorpay/order")
async def create_razorpay_order(payload: dict, payment_service: PaymentOrderService = Depends(get_payment_service)):
    """Open a Razorpay order for one checkout attempt.

    Body: {amount (rupees), currency?, receipt?, notes?}. The response carries the
    public key id so the client can launch the hosted checkout.
    """
    return no_store_json(await payment_service.create_order(
        amount=payload.get("amount"),
        currency=payload.get("currency"),
        receipt_seed=payload.get("receipt"),
        notes=payload.get("notes"),
    ))

import logging
import math
import time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Callable, Dict, Optional, Tuple

import aiohttp

from core.exceptions import ConfigurationError, GatewayError, InvalidAmount, InvalidRequest
from utils.timing import timeit

logger = logging.getLogger(__name__)

MAX_RECEIPT_LENGTH = 40
RECEIPT_SEED_CHARS = 8
# Largest decimal exponent of a finite float
MAX_AMOUNT_EXPONENT = 308
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value < 0:
        return "-" + to_base36(-value)
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def current_millis() -> int:
    return int(time.time() * 1000)


def build_receipt(seed: Optional[str], now_ms: int) -> str:
    """Gateway receipts are capped at 40 chars: keep the seed's tail plus a base-36 timestamp."""
    stamp = to_base36(now_ms)
    if seed:
        return f"{seed[-RECEIPT_SEED_CHARS:]}_{stamp}"[:MAX_RECEIPT_LENGTH]
    return f"order_{stamp}"[:MAX_RECEIPT_LENGTH]


def to_minor_units(amount: Any) -> int:
    """Convert major units (rupees) to minor units (paise), rounding half up."""
    if amount is None or isinstance(amount, bool):
        raise InvalidAmount()
    if isinstance(amount, float) and not math.isfinite(amount):
        raise InvalidAmount()
    try:
        major = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount()
    if not major.is_finite() or major <= 0 or major.adjusted() > MAX_AMOUNT_EXPONENT:
        raise InvalidAmount()
    # Enough digits for the whole part plus paise, so quantize stays exact
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(major.as_tuple().digits) + 3, major.adjusted() + 4)
        try:
            minor = int((major * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        except InvalidOperation:
            raise InvalidAmount()
    if minor < 1:
        raise InvalidAmount()
    return minor


class RazorpayGateway:
    """Thin aiohttp client for the Razorpay orders endpoint."""

    def __init__(self, key_id: str, key_secret: str, api_base: str = "https://api.razorpay.com/v1"):
        self._auth = aiohttp.BasicAuth(key_id, key_secret)
        self._orders_url = f"{api_base.rstrip('/')}/orders"

    async def create_order(self, payload: Dict[str, Any]) -> Tuple[int, Any]:
        headers = {"Content-Type": "application/json"}
        async with aiohttp.ClientSession() as session:
            async with session.post(self._orders_url, json=payload, auth=self._auth, headers=headers) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    data = {"raw": await resp.text()}
                return resp.status, data


class PaymentOrderService:
    """Opens one gateway order per checkout attempt; nothing is stored locally."""

    def __init__(
        self,
        key_id: Optional[str],
        key_secret: Optional[str],
        gateway: Optional[RazorpayGateway] = None,
        api_base: str = "https://api.razorpay.com/v1",
        default_currency: str = "INR",
        clock_ms: Callable[[], int] = current_millis,
    ):
        self._key_id = key_id
        self._key_secret = key_secret
        self._gateway = gateway
        self._api_base = api_base
        self._default_currency = default_currency
        self._clock_ms = clock_ms

    def _get_gateway(self) -> RazorpayGateway:
        if not self._key_id or not self._key_secret:
            logger.error("Razorpay credentials not configured")
            raise ConfigurationError()
        if self._gateway is None:
            self._gateway = RazorpayGateway(self._key_id, self._key_secret, self._api_base)
        return self._gateway

    @timeit("create_razorpay_order")
    async def create_order(
        self,
        amount: Any,
        currency: Optional[str] = None,
        receipt_seed: Optional[str] = None,
        notes: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        amount_minor = to_minor_units(amount)
        if notes is None:
            notes = {}
        if not isinstance(notes, dict):
            raise InvalidRequest("notes must be an object")
        gateway = self._get_gateway()

        seed = str(receipt_seed) if receipt_seed not in (None, "") else None
        payload = {
            "amount": amount_minor,
            "currency": currency or self._default_currency,
            "receipt": build_receipt(seed, self._clock_ms()),
            "notes": notes,
        }
        logger.info(
            f"Creating Razorpay order: amount={payload['amount']} currency={payload['currency']} receipt={payload['receipt']}"
        )

        try:
            status, data = await gateway.create_order(payload)
        except aiohttp.ClientError as e:
            logger.error(f"Razorpay connection error: {e}")
            raise GatewayError(status_code=502, details={"reason": str(e)}, message="Unable to connect to payment gateway")

        if status < 200 or status >= 300:
            logger.error(f"Razorpay order creation failed: {status} {data}")
            raise GatewayError(status_code=status, details=data)
        if not isinstance(data, dict) or not data.get("id"):
            logger.error(f"Razorpay returned {status} without an order id: {data}")
            raise GatewayError(status_code=502, details=data)

        logger.info(f"Razorpay order created: {data.get('id')}")
        return {
            "order_id": data.get("id"),
            "amount": data.get("amount"),
            "currency": data.get("currency"),
            "key_id": self._key_id,
        }

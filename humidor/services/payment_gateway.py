# humidor/services/payment_gateway.py
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict

import requests
from requests import RequestException

from humidor.domain.errors import GatewayCommunicationError, PaymentError
from humidor.utils import settings
from humidor.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ChargeResult:
    transaction_id: str
    amount: Decimal
    provider: str
    message: str = ""
    raw: Dict[str, Any] = field(default_factory=dict)


def to_gateway_amount(amount: Decimal, exponent: int) -> int:
    """
    Decimal money -> integer in the gateway's unit (10^exponent per currency unit).
    Raises ValueError when the amount has finer precision than the unit allows.
    """
    scaled = amount * (Decimal(10) ** exponent)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{amount} is not a whole number of gateway units (exponent {exponent})")
    return int(scaled)


class PaymentGateway:
    """
    Pay-by-prime HTTP client.

    charge() is called at most once per checkout attempt and is never
    retried: an ambiguous failure may already have captured the money.
    """

    def __init__(
        self,
        url: str | None = None,
        partner_key: str | None = None,
        merchant_id: str | None = None,
        currency: str | None = None,
        amount_exponent: int | None = None,
        provider: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.url = url or settings.PAYMENT_GATEWAY_URL
        self.partner_key = partner_key if partner_key is not None else settings.PAYMENT_PARTNER_KEY
        self.merchant_id = merchant_id if merchant_id is not None else settings.PAYMENT_MERCHANT_ID
        self.currency = currency or settings.PAYMENT_CURRENCY
        self.amount_exponent = (
            amount_exponent if amount_exponent is not None else settings.PAYMENT_AMOUNT_EXPONENT
        )
        self.provider = provider or settings.PAYMENT_PROVIDER_NAME
        self.timeout = timeout or settings.PAYMENT_TIMEOUT_SECONDS
        self.http = session or requests.Session()

    def _payload(self, amount: Decimal, token: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        cardholder = {
            "name": metadata.get("name") or "Customer",
            "email": metadata.get("email") or "",
        }
        if metadata.get("phone_number"):
            cardholder["phone_number"] = metadata["phone_number"]

        return {
            "prime": token,
            "partner_key": self.partner_key,
            "merchant_id": self.merchant_id,
            "amount": to_gateway_amount(amount, self.amount_exponent),
            "currency": self.currency,
            "details": metadata.get("details") or "Humidor Shop order",
            "cardholder": cardholder,
            "remember": False,
        }

    def charge(self, amount: Decimal, token: str, metadata: Dict[str, Any] | None = None) -> ChargeResult:
        if not self.partner_key or not self.merchant_id:
            logger.error("Payment gateway credentials missing")
            raise GatewayCommunicationError("Payment configuration error.")

        try:
            payload = self._payload(amount, token, metadata or {})
        except ValueError as e:
            # the charged amount must equal the recorded Payment.amount
            logger.error(f"Refusing to charge {amount} {self.currency}: {e}")
            raise GatewayCommunicationError(
                f"Order total {amount} cannot be charged in {self.currency}.", amount=amount
            ) from e

        logger.info(f"PaymentGateway POST {self.url} amount={payload['amount']} {self.currency}")

        try:
            resp = self.http.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json", "x-api-key": self.partner_key},
                timeout=self.timeout,
            )
        except RequestException as e:
            logger.error(f"Error calling payment gateway: {e}")
            raise GatewayCommunicationError("Failed to communicate with payment gateway.") from e

        try:
            body = resp.json()
        except ValueError as e:
            logger.error(f"Payment gateway returned non-JSON response ({resp.status_code})")
            raise GatewayCommunicationError(
                f"Payment gateway communication error ({resp.status_code})."
            ) from e

        status = body.get("status") if isinstance(body, dict) else None
        if status is None:
            logger.error(f"Payment gateway response without status ({resp.status_code}): {body}")
            raise GatewayCommunicationError(f"Payment gateway communication error ({resp.status_code}).")

        if status != 0:
            msg = body.get("msg") or "Payment failed."
            logger.warning(f"Payment declined: status={status} msg={msg}")
            raise PaymentError(f"Payment Error: {msg} (Status: {status})", gateway_status=status)

        transaction_id = body.get("rec_trade_id")
        if not transaction_id:
            # status 0 without a trade id cannot be reconciled; treat as ambiguous
            logger.error(f"Payment gateway success without rec_trade_id: {body}")
            raise GatewayCommunicationError("Payment gateway returned an incomplete response.")

        logger.info(f"Payment captured: rec_trade_id={transaction_id}")
        return ChargeResult(
            transaction_id=transaction_id,
            amount=amount,
            provider=self.provider,
            message=body.get("msg", ""),
            raw=body,
        )

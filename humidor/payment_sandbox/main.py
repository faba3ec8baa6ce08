# humidor/payment_sandbox/main.py
"""Local stand-in for the pay-by-prime endpoint, for development only."""
import uuid

from fastapi import FastAPI, Header
from pydantic import BaseModel, Field

app = FastAPI(title="Payment Gateway (dev mock)")

# prime -> (status, msg); anything else is approved
DECLINED_PRIMES = {
    "decline": (10003, "Card Error"),
    "insufficient-funds": (10005, "Insufficient balance"),
}


class Cardholder(BaseModel):
    name: str = ""
    email: str = ""
    phone_number: str | None = None


class PayByPrimeIn(BaseModel):
    prime: str
    partner_key: str
    merchant_id: str
    amount: int = Field(..., gt=0)
    currency: str = "TWD"
    details: str = ""
    cardholder: Cardholder = Field(default_factory=Cardholder)
    remember: bool = False


@app.post("/tpc/payment/pay-by-prime")
def pay_by_prime(payload: PayByPrimeIn, x_api_key: str | None = Header(None)):
    if not x_api_key or x_api_key != payload.partner_key:
        return {"status": 4, "msg": "Authentication failed"}

    if payload.prime in DECLINED_PRIMES:
        status, msg = DECLINED_PRIMES[payload.prime]
        return {"status": status, "msg": msg}

    return {
        "status": 0,
        "msg": "Success",
        "rec_trade_id": f"D{uuid.uuid4().hex[:20].upper()}",
        "bank_transaction_id": uuid.uuid4().hex,
        "order_number": "",
        "acquirer": "SANDBOX",
        "amount": payload.amount,
        "currency": payload.currency,
    }

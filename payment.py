# payment.py
import asyncio
import logging
import random
import string
import time
from decimal import Decimal

import schemas
from config import PAYMENT_SUCCESS_RATE, PAYMENT_DELAY_SECONDS

logger = logging.getLogger(__name__)

FAILURE_REASON = "JazzCash payment could not be processed"

def _transaction_id(rng) -> str:
    suffix = "".join(rng.choice(string.ascii_lowercase + string.digits) for _ in range(9))
    return f"JC{int(time.time() * 1000)}{suffix}"

async def attempt_payment(amount: Decimal, rng=random, delay: float = PAYMENT_DELAY_SECONDS) -> schemas.PaymentResult:
    """Simulate a single JazzCash charge.

    Succeeds with probability PAYMENT_SUCCESS_RATE regardless of the amount.
    There are no retries: a failed attempt is final for that checkout.
    """
    if delay:
        await asyncio.sleep(delay)

    if rng.random() < PAYMENT_SUCCESS_RATE:
        result = schemas.PaymentResult(success=True, transaction_id=_transaction_id(rng))
        logger.info("💳 Simulated payment of %s approved (%s)", amount, result.transaction_id)
    else:
        result = schemas.PaymentResult(success=False, reason=FAILURE_REASON)
        logger.info("💳 Simulated payment of %s declined", amount)
    return result

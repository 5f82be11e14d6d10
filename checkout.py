# checkout.py
"""Order placement: cart + customer details in, persisted order and admin notification out."""
import contextlib
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Union

from databases import Database
from pydantic import ValidationError

import crud
import schemas
from config import ATOMIC_CHECKOUT, DELIVERY_FEE
from payment import attempt_payment

logger = logging.getLogger(__name__)

ONLINE_PAYMENT = "jazzcash"
PAYMENT_ALIASES = {"online": ONLINE_PAYMENT}

# ========== ERRORS ==========
class CheckoutError(Exception):
    status_code = 400

    def __init__(self, message: str, error: Any = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body

class CheckoutValidationError(CheckoutError):
    pass

class PaymentFailedError(CheckoutError):
    pass

class InvalidStatusError(CheckoutError):
    pass

class OrderNotFoundError(CheckoutError):
    status_code = 404

# ========== TOTALS ==========
def compute_subtotal(cart: Iterable[schemas.CartItem]) -> Decimal:
    subtotal = sum((item.product.price * item.quantity for item in cart), Decimal("0"))
    return subtotal.quantize(crud.CENT, rounding=ROUND_HALF_UP)

def compute_totals(cart: Iterable[schemas.CartItem]) -> Dict[str, Decimal]:
    subtotal = compute_subtotal(cart)
    return {
        "subtotal": subtotal,
        "delivery_fee": DELIVERY_FEE,
        "total": subtotal + DELIVERY_FEE,
    }

def normalize_payment_method(payment_method: str) -> str:
    return PAYMENT_ALIASES.get(payment_method, payment_method)

# ========== STATUS ==========
def check_status(status: str):
    if status not in schemas.ORDER_STATUSES:
        raise InvalidStatusError("Invalid status", f"status must be one of {', '.join(schemas.ORDER_STATUSES)}")

def check_status_transition(current: str, new: str):
    """Statuses only move forward: pending -> processing -> completed."""
    check_status(new)
    if schemas.ORDER_STATUSES.index(new) < schemas.ORDER_STATUSES.index(current):
        raise InvalidStatusError("Invalid status transition", f"cannot move order from {current} to {new}")

async def update_order_status(db: Database, order_id: int, status: str) -> dict:
    check_status(status)

    order = await crud.get_order_by_id(db, order_id)
    if not order:
        raise OrderNotFoundError("Order not found")

    check_status_transition(order["status"], status)
    if order["status"] == status:
        return order

    updated = await crud.update_order_status(db, order_id, status)
    if not updated:
        raise OrderNotFoundError("Order not found")
    logger.info("📝 Order #%s moved %s -> %s", order_id, order["status"], status)
    return updated

# ========== PIPELINE ==========
class CheckoutPipeline:
    """Turns a checkout request into a persisted order and notifies admins.

    ``broadcaster`` needs an async ``broadcast(event)``; ``payment`` is an async
    callable taking the order total and returning ``schemas.PaymentResult``.
    With ``atomic`` set, the customer row, payment check and order row share one
    transaction, so a declined payment leaves no customer behind.
    """

    def __init__(self, db: Database, broadcaster, payment=attempt_payment, atomic: bool = ATOMIC_CHECKOUT):
        self.db = db
        self.broadcaster = broadcaster
        self.payment = payment
        self.atomic = atomic

    @staticmethod
    def validate(checkout: Union[schemas.CheckoutRequest, Dict[str, Any]]) -> schemas.CheckoutRequest:
        if isinstance(checkout, schemas.CheckoutRequest):
            return checkout
        try:
            return schemas.CheckoutRequest.model_validate(checkout)
        except ValidationError as e:
            raise CheckoutValidationError(
                "Invalid order data",
                e.errors(include_url=False, include_context=False, include_input=False),
            )

    def _transaction(self):
        return self.db.transaction() if self.atomic else contextlib.nullcontext()

    async def place_order(self, checkout: Union[schemas.CheckoutRequest, Dict[str, Any]]) -> Dict[str, dict]:
        checkout = self.validate(checkout)
        payment_method = normalize_payment_method(checkout.payment_method)
        cart = [item.model_dump(mode="json", by_alias=True, exclude_unset=True) for item in checkout.cart]

        async with self._transaction():
            order, customer = await self._persist(checkout, payment_method, cart)

        await self._notify(order, customer, cart)
        return {"order": order, "customer": customer}

    async def _persist(self, checkout: schemas.CheckoutRequest, payment_method: str, cart: list):
        if checkout.user_id is not None and not await crud.get_user(self.db, checkout.user_id):
            raise CheckoutValidationError("Invalid order data", f"user {checkout.user_id} does not exist")

        customer = await crud.create_customer(self.db, checkout.customer)
        logger.info("🧾 Customer #%s created for checkout (%s)", customer["id"], payment_method)

        totals = compute_totals(checkout.cart)

        if payment_method == ONLINE_PAYMENT:
            result = await self.payment(totals["total"])
            if not result.success:
                logger.warning("❌ Payment declined for customer #%s, total %s", customer["id"], totals["total"])
                raise PaymentFailedError("Payment failed", result.reason)

        order = await crud.create_order(
            self.db,
            customer_id=customer["id"],
            user_id=checkout.user_id,
            items=cart,
            payment_method=payment_method,
            **totals,
        )
        logger.info("✅ Order #%s created: subtotal %s, total %s", order["id"], order["subtotal"], order["total"])
        return order, customer

    async def _notify(self, order: dict, customer: dict, cart: list):
        event = schemas.NewOrderEvent(
            order={
                **schemas.Order.model_validate(order).model_dump(mode="json", by_alias=True),
                "customer": schemas.Customer.model_validate(customer).model_dump(mode="json", by_alias=True),
                "items": cart,
            },
        ).model_dump(mode="json")
        try:
            await self.broadcaster.broadcast(event)
        except Exception:
            logger.exception("Broadcast of order #%s failed", order["id"])

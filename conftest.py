# conftest.py
import asyncio
import os
import tempfile

# Point the app at a throwaway database before anything reads config
_test_dir = tempfile.mkdtemp(prefix="grocerymart-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_test_dir, 'test.db')}"
os.environ["PAYMENT_DELAY_SECONDS"] = "0"
os.environ["ATOMIC_CHECKOUT"] = "true"

import pytest
from databases import Database
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from config import DATABASE_URL
from database import engine, Base
import models  # noqa: F401
import schemas
import main

@pytest.fixture(autouse=True)
def clean_tables():
    Base.metadata.create_all(bind=engine)
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield

@pytest.fixture
def client():
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()

@pytest.fixture
def run_db():
    """Run ``fn(db)`` on a freshly connected Database inside its own event loop."""
    def runner(fn):
        async def run():
            db = Database(DATABASE_URL)
            await db.connect()
            try:
                return await fn(db)
            finally:
                await db.disconnect()
        return asyncio.run(run())
    return runner

@pytest.fixture
def count_rows():
    def counter(model) -> int:
        with engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(model)).scalar()
    return counter

@pytest.fixture
def checkout_payload():
    def build(payment_method="cod", **overrides):
        payload = {
            "customer": {
                "fullName": "Ayesha Khan",
                "phone": "0300-1234567",
                "address": "12 Canal Road",
                "city": "Lahore",
            },
            "paymentMethod": payment_method,
            "cart": [
                {
                    "product": {"id": 1, "name": "Organic Bananas", "price": "2.99", "category": "Fruits", "unit": "per kg"},
                    "quantity": 2,
                },
                {
                    "product": {"id": 2, "name": "Fresh Milk", "price": "3.49", "category": "Dairy", "unit": "per liter"},
                    "quantity": 1,
                },
            ],
        }
        payload.update(overrides)
        return payload
    return build

class RecordingBroadcaster:
    def __init__(self):
        self.events = []

    async def broadcast(self, event):
        self.events.append(event)
        return 1

@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()

@pytest.fixture
def fixed_payment():
    """Payment stub with a fixed outcome that records the amounts it was charged."""
    def build(success: bool):
        calls = []

        async def pay(amount):
            calls.append(amount)
            if success:
                return schemas.PaymentResult(success=True, transaction_id="JC-test")
            return schemas.PaymentResult(success=False, reason="JazzCash payment could not be processed")

        pay.calls = calls
        return pay
    return build

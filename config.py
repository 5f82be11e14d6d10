# config.py
import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

# ========== DATABASE ==========
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./grocery_store.db")
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

SEED_DATABASE = os.getenv("SEED_DATABASE", "true").lower() != "false"

# ========== JWT ==========
SECRET_KEY = os.getenv("SECRET_KEY", "c1a4e7f0b2d95a8e3f6c0d7b1e4a9f2c5d8b3e6a0f7c2d9e4b1a8f5c3e6d0b7a")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

# ========== CHECKOUT ==========
DELIVERY_FEE = Decimal("2.99")
PAYMENT_SUCCESS_RATE = 0.9
PAYMENT_DELAY_SECONDS = float(os.getenv("PAYMENT_DELAY_SECONDS", "0"))

# Customer + order rows commit together; "false" keeps the customer after a failed payment
ATOMIC_CHECKOUT = os.getenv("ATOMIC_CHECKOUT", "true").lower() != "false"

# ========== SERVER ==========
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:5000,http://127.0.0.1:5000,http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEFAULT_ADMIN_EMAIL = "admin@grocerymart.com"
DEFAULT_ADMIN_PASSWORD = "admin123"

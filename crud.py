# crud.py
import json
import logging
from decimal import Decimal
from sqlalchemy import func, select, update, delete
from databases import Database
from models import Product, Customer, User, Order, Admin
import schemas
from typing import Optional, List, Dict, Any, Iterable

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

def _as_dict(record) -> Optional[dict]:
    return dict(record._mapping) if record is not None else None

def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT)

# ========== PRODUCT CRUD ==========
def _product_dict(record) -> Optional[dict]:
    product = _as_dict(record)
    if product:
        product["price"] = to_money(product["price"])
    return product

async def get_products(db: Database) -> List[dict]:
    query = select(Product).order_by(Product.id)
    results = await db.fetch_all(query)
    return [_product_dict(product) for product in results]

async def get_product(db: Database, product_id: int) -> Optional[dict]:
    query = select(Product).where(Product.id == product_id)
    return _product_dict(await db.fetch_one(query))

async def create_product(db: Database, product: schemas.ProductCreate) -> dict:
    query = Product.__table__.insert().values(**product.model_dump())
    product_id = await db.execute(query)
    return await get_product(db, product_id)

async def update_product(db: Database, product_id: int, product_update: schemas.ProductUpdate) -> Optional[dict]:
    product = await get_product(db, product_id)
    if not product:
        return None

    update_data = product_update.model_dump(exclude_unset=True)
    if update_data:
        query = update(Product).where(Product.id == product_id).values(**update_data)
        await db.execute(query)

    return await get_product(db, product_id)

async def delete_product(db: Database, product_id: int) -> bool:
    if not await get_product(db, product_id):
        return False
    await db.execute(delete(Product).where(Product.id == product_id))
    return True

# ========== CUSTOMER CRUD ==========
async def get_customer(db: Database, customer_id: int) -> Optional[dict]:
    query = select(Customer).where(Customer.id == customer_id)
    return _as_dict(await db.fetch_one(query))

async def get_customers_by_ids(db: Database, customer_ids: Iterable[int]) -> Dict[int, dict]:
    ids = set(customer_ids)
    if not ids:
        return {}
    query = select(Customer).where(Customer.id.in_(ids))
    results = await db.fetch_all(query)
    return {customer["id"]: customer for customer in map(_as_dict, results)}

async def create_customer(db: Database, customer: schemas.CustomerCreate) -> dict:
    """Always inserts a new row; repeat buyers are not looked up."""
    query = Customer.__table__.insert().values(**customer.model_dump())
    customer_id = await db.execute(query)
    return await get_customer(db, customer_id)

# ========== ORDER CRUD ==========
def _order_dict(record) -> Optional[dict]:
    order = _as_dict(record)
    if order:
        order["items"] = json.loads(order["items"])
        for field in ("subtotal", "delivery_fee", "total"):
            order[field] = to_money(order[field])
    return order

async def get_order_by_id(db: Database, order_id: int) -> Optional[dict]:
    query = select(Order).where(Order.id == order_id)
    return _order_dict(await db.fetch_one(query))

async def get_orders(db: Database) -> List[dict]:
    query = select(Order).order_by(Order.id.desc())
    results = await db.fetch_all(query)
    return [_order_dict(order) for order in results]

async def get_orders_with_customers(db: Database) -> List[dict]:
    orders = await get_orders(db)
    customers = await get_customers_by_ids(db, (order["customer_id"] for order in orders))
    for order in orders:
        order["customer"] = customers.get(order["customer_id"])
    return orders

async def get_orders_for_user(db: Database, user_id: int) -> List[dict]:
    query = select(Order).where(Order.user_id == user_id).order_by(Order.id.desc())
    results = await db.fetch_all(query)
    return [_order_dict(order) for order in results]

async def create_order(
    db: Database,
    *,
    customer_id: int,
    items: List[Dict[str, Any]],
    subtotal: Decimal,
    delivery_fee: Decimal,
    total: Decimal,
    payment_method: str,
    user_id: Optional[int] = None,
) -> dict:
    query = Order.__table__.insert().values(
        user_id=user_id,
        customer_id=customer_id,
        items=json.dumps(items),
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        total=total,
        payment_method=payment_method,
        status="pending",
    )
    order_id = await db.execute(query)
    return await get_order_by_id(db, order_id)

async def update_order_status(db: Database, order_id: int, status: str) -> Optional[dict]:
    if not await get_order_by_id(db, order_id):
        return None
    query = update(Order).where(Order.id == order_id).values(status=status)
    await db.execute(query)
    return await get_order_by_id(db, order_id)

async def delete_order(db: Database, order_id: int) -> bool:
    if not await get_order_by_id(db, order_id):
        return False
    await db.execute(delete(Order).where(Order.id == order_id))
    return True

async def count_orders(db: Database) -> int:
    return await db.fetch_val(select(func.count()).select_from(Order)) or 0

# ========== USER CRUD ==========
async def get_user(db: Database, user_id: int) -> Optional[dict]:
    query = select(User).where(User.id == user_id)
    return _as_dict(await db.fetch_one(query))

async def get_user_by_email(db: Database, email: str) -> Optional[dict]:
    query = select(User).where(User.email == email)
    return _as_dict(await db.fetch_one(query))

async def create_user(db: Database, user: schemas.UserSignup) -> dict:
    query = User.__table__.insert().values(**user.model_dump())
    user_id = await db.execute(query)
    return await get_user(db, user_id)

async def authenticate_user(db: Database, email: str, password: str) -> Optional[dict]:
    user = await get_user_by_email(db, email)
    if not user or user["password"] != password:
        return None
    return user

# ========== ADMIN CRUD ==========
async def get_admin_by_email(db: Database, email: str) -> Optional[dict]:
    query = select(Admin).where(Admin.email == email)
    return _as_dict(await db.fetch_one(query))

async def create_admin(db: Database, email: str, password: str) -> dict:
    await db.execute(Admin.__table__.insert().values(email=email, password=password))
    return await get_admin_by_email(db, email)

async def authenticate_admin(db: Database, email: str, password: str) -> Optional[dict]:
    admin = await get_admin_by_email(db, email)
    if not admin or admin["password"] != password:
        return None
    return admin

# ========== DASHBOARD STATS ==========
async def get_dashboard_stats(db: Database) -> dict:
    total_products = await db.fetch_val(select(func.count()).select_from(Product)) or 0
    total_orders = await count_orders(db)

    revenue_result = await db.fetch_val(select(func.sum(Order.total)))
    revenue = to_money(revenue_result) if revenue_result is not None else to_money(0)

    customers_query = select(func.count(func.distinct(Order.customer_id)))
    customers = await db.fetch_val(customers_query) or 0

    return {
        "products": total_products,
        "orders": total_orders,
        "revenue": revenue,
        "customers": customers,
    }

# ========== SEED DATA ==========
SAMPLE_PRODUCTS = [
    {"name": "Organic Bananas", "price": "2.99", "category": "Fruits", "unit": "per kg"},
    {"name": "Fresh Milk", "price": "3.49", "category": "Dairy", "unit": "per liter"},
    {"name": "Whole Wheat Bread", "price": "2.79", "category": "Bakery", "unit": "per loaf"},
    {"name": "Free Range Eggs", "price": "4.99", "category": "Dairy", "unit": "per dozen"},
    {"name": "Organic Chicken Breast", "price": "12.99", "category": "Meat", "unit": "per kg"},
    {"name": "Fresh Tomatoes", "price": "1.99", "category": "Vegetables", "unit": "per kg"},
    {"name": "Basmati Rice", "price": "5.99", "category": "Pantry", "unit": "per kg"},
    {"name": "Greek Yogurt", "price": "3.99", "category": "Dairy", "unit": "per container"},
    {"name": "Salmon Fillet", "price": "15.99", "category": "Meat", "unit": "per kg"},
    {"name": "Organic Apples", "price": "4.49", "category": "Fruits", "unit": "per kg"},
    {"name": "Olive Oil", "price": "8.99", "category": "Pantry", "unit": "per bottle"},
    {"name": "Fresh Spinach", "price": "2.49", "category": "Vegetables", "unit": "per bunch"},
]

async def seed_database(db: Database, admin_email: str, admin_password: str):
    """Insert demo products into an empty catalog and make sure the default admin exists"""
    product_count = await db.fetch_val(select(func.count()).select_from(Product)) or 0
    if product_count == 0:
        for product in SAMPLE_PRODUCTS:
            await create_product(db, schemas.ProductCreate(**product))
        logger.info("📦 Seeded %d sample products", len(SAMPLE_PRODUCTS))
    else:
        logger.info("✅ %d products already exist", product_count)

    if not await get_admin_by_email(db, admin_email):
        await create_admin(db, admin_email, admin_password)
        logger.info("👤 Default admin %s created", admin_email)

# schemas.py
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any, Literal, Annotated
from datetime import datetime

ORDER_STATUSES = ("pending", "processing", "completed")

RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]

class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

# ========== PRODUCT SCHEMAS ==========
class ProductBase(CamelModel):
    name: RequiredStr
    price: Money
    category: RequiredStr
    unit: RequiredStr
    image: Optional[str] = None

class ProductCreate(ProductBase):
    pass

class ProductUpdate(CamelModel):
    name: Optional[RequiredStr] = None
    price: Optional[Money] = None
    category: Optional[RequiredStr] = None
    unit: Optional[RequiredStr] = None
    image: Optional[str] = None

class Product(ProductBase):
    id: int
    created_at: Optional[datetime] = None

# ========== CUSTOMER SCHEMAS ==========
class CustomerCreate(CamelModel):
    full_name: RequiredStr
    phone: RequiredStr
    address: RequiredStr
    city: RequiredStr

class Customer(CustomerCreate):
    id: int
    created_at: Optional[datetime] = None

# ========== CART SCHEMAS ==========
class CartProduct(CamelModel):
    """Product as the client saw it when adding to the cart.

    Only the price takes part in totals; any other catalog fields the client
    sends are carried along untouched in the order snapshot.
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    name: Optional[str] = None
    price: Decimal = Field(ge=0)
    category: Optional[str] = None
    unit: Optional[str] = None
    image: Optional[str] = None

class CartItem(CamelModel):
    product: CartProduct
    quantity: int = Field(ge=1)

# ========== ORDER SCHEMAS ==========
class CheckoutRequest(CamelModel):
    customer: CustomerCreate
    payment_method: Literal["cod", "jazzcash", "online"]
    cart: List[CartItem] = Field(min_length=1)
    user_id: Optional[int] = None

class Order(CamelModel):
    id: int
    user_id: Optional[int] = None
    customer_id: int
    items: List[CartItem]
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    payment_method: str
    status: str = "pending"
    created_at: Optional[datetime] = None

class OrderWithCustomer(Order):
    customer: Optional[Customer] = None

class CheckoutResponse(CamelModel):
    order: Order
    customer: Customer

class OrderStatusUpdate(CamelModel):
    # Checked against ORDER_STATUSES by the handler so a bad value is a 400, not a 422
    status: str

# ========== PAYMENT SCHEMAS ==========
class PaymentResult(CamelModel):
    success: bool
    transaction_id: Optional[str] = None
    reason: Optional[str] = None

# ========== USER SCHEMAS ==========
class UserSignup(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=2)
    phone: Optional[str] = None
    address: Optional[str] = None

class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

class UserPublic(CamelModel):
    id: int
    email: str
    name: str

class UserResponse(CamelModel):
    user: UserPublic

# ========== ADMIN SCHEMAS ==========
class AdminLogin(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

class AdminPublic(CamelModel):
    id: int
    email: str

class AdminLoginResponse(CamelModel):
    message: str
    admin: AdminPublic
    access_token: str
    token_type: str = "bearer"

class DashboardStats(CamelModel):
    products: int
    orders: int
    # plain JSON number, unlike the money strings on orders
    revenue: float
    customers: int

# ========== NOTIFICATION SCHEMAS ==========
class NewOrderEvent(CamelModel):
    type: Literal["NEW_ORDER"] = "NEW_ORDER"
    order: Dict[str, Any]

# main.py
import logging
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import ALLOWED_ORIGINS, LOG_LEVEL, SEED_DATABASE, DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD
from database import database, engine, Base
from checkout import CheckoutError
from notifications import AdminBroadcaster
from admin_api import router as admin_router
from api.auth import router as auth_router
from api.notifications import router as notifications_router
from api.orders import router as orders_router
from api.products import router as products_router
import crud

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="GroceryMart API",
    description="Online grocery storefront backend with live order notifications for admins",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(products_router)
app.include_router(orders_router)
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(notifications_router)

# Startup event
@app.on_event("startup")
async def startup():
    app.state.broadcaster = AdminBroadcaster()
    await database.connect()
    logger.info("🔄 Connected to database")
    if SEED_DATABASE:
        await crud.seed_database(database, DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD)

# Shutdown event
@app.on_event("shutdown")
async def shutdown():
    await app.state.broadcaster.close()
    await database.disconnect()
    logger.info("Database disconnected")

# ========== ERROR HANDLERS ==========
@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "error": jsonable_encoder(exc.errors())},
    )

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "error": str(exc)},
    )

# ========== ROOT ENDPOINTS ==========
@app.get("/")
async def read_root():
    return {
        "message": "Welcome to GroceryMart API",
        "version": "1.0.0",
        "endpoints": {
            "docs": "/docs",
            "products": "/api/products",
            "orders": "/api/orders",
            "order_status": "/api/orders/{id}/status",
            "user_orders": "/api/user/{user_id}/orders",
            "signup": "/api/auth/signup",
            "login": "/api/auth/login",
            "admin_login": "/api/admin/login",
            "admin_stats": "/api/admin/stats",
            "admin_socket": "/ws",
        }
    }

@app.get("/health")
async def health_check():
    db_status = "connected"
    try:
        await database.execute("SELECT 1")
    except Exception as e:
        logger.warning("Health check could not reach database: %s", e)
        db_status = "disconnected"

    return {
        "status": "healthy",
        "database": db_status,
        "admin_connections": len(app.state.broadcaster),
        "timestamp": datetime.now().isoformat(),
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5000)

# admin_api.py
from fastapi import APIRouter, Depends, HTTPException, status
from databases import Database
from database import get_db
from dependencies import create_access_token, get_current_admin
import crud
import schemas

router = APIRouter(prefix="/api/admin", tags=["admin"])

# ========== AUTH ENDPOINTS ==========
@router.post("/login", response_model=schemas.AdminLoginResponse)
async def admin_login(credentials: schemas.AdminLogin, db: Database = Depends(get_db)):
    admin = await crud.authenticate_admin(db, credentials.email, credentials.password)
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {
        "message": "Login successful",
        "admin": admin,
        "access_token": create_access_token(data={"sub": admin["email"]}),
        "token_type": "bearer",
    }

@router.get("/me", response_model=schemas.AdminPublic)
async def read_admin_me(current_admin: dict = Depends(get_current_admin)):
    return current_admin

# ========== DASHBOARD ENDPOINTS ==========
@router.get("/stats", response_model=schemas.DashboardStats)
async def get_dashboard_stats(db: Database = Depends(get_db)):
    return await crud.get_dashboard_stats(db)

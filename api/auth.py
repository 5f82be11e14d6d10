from fastapi import APIRouter, Depends, HTTPException, status
from databases import Database
from database import get_db
import crud
import schemas

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/signup", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(user: schemas.UserSignup, db: Database = Depends(get_db)):
    if await crud.get_user_by_email(db, user.email):
        raise HTTPException(status_code=400, detail="User already exists with this email")
    return {"user": await crud.create_user(db, user)}

@router.post("/login", response_model=schemas.UserResponse)
async def login(credentials: schemas.UserLogin, db: Database = Depends(get_db)):
    user = await crud.authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return {"user": user}

from fastapi import APIRouter, Depends, HTTPException, Response, status
from databases import Database
from typing import List
from database import get_db
import crud
import schemas

router = APIRouter(prefix="/api", tags=["products"])

@router.get("/products", response_model=List[schemas.Product])
async def read_products(db: Database = Depends(get_db)):
    return await crud.get_products(db)

@router.get("/products/{product_id}", response_model=schemas.Product)
async def read_product(product_id: int, db: Database = Depends(get_db)):
    db_product = await crud.get_product(db, product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return db_product

@router.post("/products", response_model=schemas.Product, status_code=status.HTTP_201_CREATED)
async def create_product(product: schemas.ProductCreate, db: Database = Depends(get_db)):
    return await crud.create_product(db, product)

@router.put("/products/{product_id}", response_model=schemas.Product)
async def update_product(product_id: int, product: schemas.ProductUpdate, db: Database = Depends(get_db)):
    db_product = await crud.update_product(db, product_id, product)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return db_product

@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: int, db: Database = Depends(get_db)):
    if not await crud.delete_product(db, product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

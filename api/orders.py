from fastapi import APIRouter, Depends, HTTPException, Response, status
from databases import Database
from typing import List
from database import get_db
from checkout import CheckoutPipeline, update_order_status
from dependencies import get_checkout_pipeline
import crud
import schemas

router = APIRouter(prefix="/api", tags=["orders"])

@router.get("/orders", response_model=List[schemas.OrderWithCustomer])
async def read_orders(db: Database = Depends(get_db)):
    return await crud.get_orders_with_customers(db)

@router.post("/orders", response_model=schemas.CheckoutResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    checkout: schemas.CheckoutRequest,
    pipeline: CheckoutPipeline = Depends(get_checkout_pipeline),
):
    return await pipeline.place_order(checkout)

@router.get("/orders/{order_id}", response_model=schemas.OrderWithCustomer)
async def read_order(order_id: int, db: Database = Depends(get_db)):
    db_order = await crud.get_order_by_id(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    db_order["customer"] = await crud.get_customer(db, db_order["customer_id"])
    return db_order

@router.put("/orders/{order_id}/status", response_model=schemas.Order)
async def change_order_status(order_id: int, status_update: schemas.OrderStatusUpdate, db: Database = Depends(get_db)):
    return await update_order_status(db, order_id, status_update.status)

@router.delete("/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: int, db: Database = Depends(get_db)):
    if not await crud.delete_order(db, order_id):
        raise HTTPException(status_code=404, detail="Order not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/user/{user_id}/orders", response_model=List[schemas.Order])
async def read_user_orders(user_id: int, db: Database = Depends(get_db)):
    return await crud.get_orders_for_user(db, user_id)

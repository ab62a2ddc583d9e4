# compost_api/routers/admin_customers.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from compost_api.deps import get_store
from compost_api.repos import StoreError
from compost_api.schemas import CustomerDetail, CustomerOut
from compost_api.services.joins import customer_assignments

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/customers", tags=["admin"])

@router.get("", response_model=List[CustomerOut])
async def list_customers(search: Optional[str] = Query(None), store=Depends(get_store)):
    """Customers by name; `search` matches name, address or phone (case-insensitive)."""
    term = (search or "").strip() or None
    try:
        return await store.list_customers(search=term)
    except StoreError as ex:
        logger.error("Error fetching customers: %s", ex)
        raise HTTPException(500, "Failed to fetch customers")

@router.get("/{customer_id}", response_model=CustomerDetail)
async def get_customer(customer_id: str, store=Depends(get_store)):
    if not customer_id.strip():
        raise HTTPException(400, "Customer ID is required")

    try:
        customer = await store.get_customer(customer_id)
    except StoreError as ex:
        logger.error("Error fetching customer %s: %s", customer_id, ex)
        raise HTTPException(500, "Failed to fetch customer")
    if customer is None:
        raise HTTPException(404, "Customer not found")

    try:
        assignments = await customer_assignments(store, customer_id)
    except StoreError as ex:
        logger.warning("Error fetching assignments for customer %s: %s", customer_id, ex)
        assignments = []

    return {**customer, "assignments": assignments}

# File: school_inventory/api/v1/api.py
from fastapi import APIRouter
from school_inventory.api.v1.endpoints import (
    auth,
    departments,
    inventory,
    item_requests,
    reports,
    users,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(departments.router, prefix="/departments", tags=["departments"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(item_requests.router, prefix="/item-requests", tags=["item requests"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])

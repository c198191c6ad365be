from fastapi import APIRouter
from storefront.api.v1.endpoints import addresses, auth

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(addresses.router, prefix="/auth/addresses", tags=["addresses"])

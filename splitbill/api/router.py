"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from splitbill.api.routes import bills, network, nft, split

api_router = APIRouter()

# Include all route modules
api_router.include_router(bills.router)
api_router.include_router(split.router)
api_router.include_router(nft.router)
api_router.include_router(network.router)

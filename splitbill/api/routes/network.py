"""
Network configuration route.
"""
from fastapi import APIRouter, Depends

from splitbill.core.network import NetworkConfig, get_network
from splitbill.core.utils import format_response

router = APIRouter(prefix="/network", tags=["network"])


@router.get("")
async def get_network_config(network: NetworkConfig = Depends(get_network)):
    """Chain the app settles payments on."""
    return format_response(network.model_dump())

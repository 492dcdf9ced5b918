"""
Chain network configuration for Base Sepolia / Base.
"""
from typing import Dict
from fastapi import Request
from pydantic import BaseModel, ConfigDict


class NetworkConfig(BaseModel):
    """Immutable description of the chain the app settles on."""
    model_config = ConfigDict(frozen=True)

    key: str
    chain_id: int
    name: str
    rpc_url: str
    explorer_url: str
    usdc_contract_address: str
    usdc_decimals: int = 6
    is_testnet: bool


NETWORKS: Dict[str, NetworkConfig] = {
    "base_sepolia": NetworkConfig(
        key="base_sepolia",
        chain_id=84532,
        name="Base Sepolia",
        rpc_url="https://sepolia.base.org",
        explorer_url="https://sepolia.basescan.org",
        usdc_contract_address="0x036CbD53842c5426634e7929541eC2318f3dCF7e",
        is_testnet=True,
    ),
    "base": NetworkConfig(
        key="base",
        chain_id=8453,
        name="Base",
        rpc_url="https://mainnet.base.org",
        explorer_url="https://basescan.org",
        usdc_contract_address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        is_testnet=False,
    ),
}


def get_network_config(name: str) -> NetworkConfig:
    """Resolve a network by key, e.g. 'base_sepolia' or 'base'."""
    key = (name or "").strip().lower().replace("-", "_")
    if key not in NETWORKS:
        raise ValueError(
            f"Unknown network '{name}'. Available networks: {', '.join(NETWORKS)}"
        )
    return NETWORKS[key]


def get_network(request: Request) -> NetworkConfig:
    """Dependency returning the network resolved at application startup."""
    return request.app.state.network

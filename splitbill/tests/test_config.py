"""
Tests for settings and network configuration.
"""
import pytest
from pydantic import ValidationError

from splitbill.core.config import Settings
from splitbill.core.network import get_network_config
from splitbill.core.utils import format_error
from splitbill.main import create_app
from fastapi.testclient import TestClient


def test_parse_cors_origins():
    settings = Settings(CORS_ORIGINS="http://a.example, http://b.example,")
    assert settings.CORS_ORIGINS == ["http://a.example", "http://b.example"]


@pytest.mark.parametrize("name, chain_id, is_testnet", [
    ("base_sepolia", 84532, True),
    ("base-sepolia", 84532, True),
    ("base", 8453, False),
])
def test_get_network_config(name, chain_id, is_testnet):
    network = get_network_config(name)
    assert network.chain_id == chain_id
    assert network.is_testnet is is_testnet


def test_unknown_network():
    with pytest.raises(ValueError, match="Unknown network"):
        get_network_config("ethereum")


def test_network_config_is_immutable():
    network = get_network_config("base")
    with pytest.raises(ValidationError):
        network.chain_id = 1


def test_network_endpoint_uses_app_configuration():
    """Test that the network is chosen when the app is built."""
    client = TestClient(create_app(Settings(NETWORK="base")))
    response = client.get("/api/network")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["chain_id"] == 8453
    assert data["usdc_contract_address"] == "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json() == {"message": "SplitBill API is running"}


def test_error_envelope_shape(client):
    """Test that error bodies carry only the success flag and message."""
    assert format_error("Split bill not found") == {"success": False, "error": "Split bill not found"}
    assert client.get("/api/split/bill_missing").json() == format_error("Split bill not found")

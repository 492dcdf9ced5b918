"""
Utility functions for the application.
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ETHEREUM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_valid_ethereum_address(address: Any) -> bool:
    """Check 0x-prefixed 40 hex character address format."""
    return isinstance(address, str) and bool(ETHEREUM_ADDRESS_RE.match(address))


def format_address(address: str, start: int = 6, end: int = 4) -> str:
    """Shorten an address for display, e.g. 0x1234...abcd."""
    if len(address) <= start + end:
        return address
    return f"{address[:start]}...{address[-end:]}"


def format_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Format success envelope."""
    response: Dict[str, Any] = {"success": True}
    if data is not None:
        response["data"] = data
    if message:
        response["message"] = message
    return response


def format_error(message: str) -> Dict[str, Any]:
    """Format error envelope."""
    return {"success": False, "error": message}


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the form stored in the database)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

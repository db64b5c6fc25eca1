from __future__ import annotations

from typing import Any, Dict


# PUBLIC_INTERFACE
def response_envelope(message: str, data: Any) -> Dict[str, Any]:
    """
    Build the standard response envelope used by every endpoint.

    Args:
        message: Human readable summary of the outcome.
        data: The payload (a schema instance, a list of them, or None).

    Returns:
        Dict with keys: message, data.
    """
    return {"message": message, "data": data}

# medintake/core/rate_limit_config.py
"""
Rate limiting configuration for the MedIntake API
"""

from fastapi import Request
from slowapi.util import get_remote_address


def get_real_ip(request: Request) -> str:
    """
    Get the real IP address, considering proxy headers.
    Needed when the API runs behind a load balancer.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


# Rate limits per endpoint group
RATE_LIMITS = {
    "workflow_start": "20/minute",   # New sessions and restarts
    "workflow_input": "120/minute",  # Field edits, uploads, location
    "workflow_submit": "10/minute",  # Submissions
}

RATE_LIMIT_MESSAGES = {
    "default": "Too many requests. Please wait a moment and try again.",
    "workflow_start": "Too many new requests started. Please wait a minute.",
    "workflow_submit": "Too many submissions. Please wait a minute.",
}


def rate_limit_group(method: str, path: str) -> str:
    """Map a request to the endpoint group its limit belongs to"""
    parts = [part for part in path.split("/") if part]
    if not parts or parts[0] != "workflows" or method.upper() not in ("POST", "PUT"):
        return "default"

    if len(parts) == 2 and method.upper() == "POST":
        return "workflow_start"
    if len(parts) == 3 and parts[2] == "restart":
        return "workflow_start"
    if len(parts) == 3 and parts[2] == "submit":
        return "workflow_submit"
    return "workflow_input"


def get_rate_limit_message(endpoint: str) -> str:
    """Get custom error message for rate limited endpoint"""
    return RATE_LIMIT_MESSAGES.get(endpoint, RATE_LIMIT_MESSAGES["default"])

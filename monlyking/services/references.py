"""Human-readable references for orders and support tickets."""
import secrets
import string
import time
from datetime import datetime

_ALPHABET = string.ascii_uppercase + string.digits


def _random_suffix(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_order_reference() -> str:
    """Order reference such as ``GV-482913-K3F9QZ``."""
    timestamp = str(int(time.time() * 1000))
    return f"GV-{timestamp[-6:]}-{_random_suffix(6)}"


def generate_ticket_reference() -> str:
    """Ticket reference such as ``ST-2026-4821QX7B``."""
    timestamp = str(int(time.time() * 1000))
    return f"ST-{datetime.utcnow().year}-{timestamp[-4:]}{_random_suffix(4)}"

import hmac
import hashlib
from eventhub.settings import TICKET_SECRET_KEY


def _token_message(ticket_id, nonce=0):
    # Tickets that were never transferred sign the bare ticket id.
    if not nonce:
        return str(ticket_id)
    return f"{ticket_id}:{nonce}"


def generate_ticket_token(ticket_id, nonce=0) -> str:
    """HMAC-SHA256 of the ticket id, hex encoded."""
    return hmac.new(
        TICKET_SECRET_KEY.encode(),
        _token_message(ticket_id, nonce).encode(),
        hashlib.sha256,
    ).hexdigest()


def verify_ticket_token(ticket_id, token, nonce=0) -> bool:
    if not token:
        return False
    expected = generate_ticket_token(ticket_id, nonce)
    return hmac.compare_digest(expected, str(token))

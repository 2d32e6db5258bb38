import time
import jwt as pyjwt
from eventhub.settings import SECRET_KEY, JWT_EXPIRY_DAYS

ALGORITHM = "HS256"


def encode_jwt(payload: dict, expires_in: int = None) -> str:
    """Sign the payload, adding an ``exp`` claim (defaults to JWT_EXPIRY_DAYS)."""
    if expires_in is None:
        expires_in = JWT_EXPIRY_DAYS * 24 * 60 * 60
    claims = dict(payload)
    claims["exp"] = int(time.time()) + expires_in
    return pyjwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_jwt(token: str) -> dict:
    # Raises pyjwt.ExpiredSignatureError / pyjwt.InvalidTokenError
    return pyjwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])

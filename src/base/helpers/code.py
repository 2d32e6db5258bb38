import random
import string


def generate_promo_code(length=8, prefix=""):
    """
    Generate a random upper-case promo code, e.g. ``SAVE-7KQ2M9XA``.
    """
    body = "".join(random.choices(string.ascii_uppercase + string.digits, k=length))
    return f"{prefix}{body}".upper()

import re


class InvalidPhoneNumber(ValueError):
    pass


def digits_only(phone_number):
    return re.sub(r"\D", "", phone_number or "")


def to_local_indian_number(phone_number):
    """
    Normalise an Indian mobile number to its 10 local digits.

    Example: "+91 98765 43210" -> "9876543210", "98765-43210" -> "9876543210"
    """
    cleaned = digits_only(phone_number)
    if cleaned.startswith("91") and len(cleaned) > 10:
        cleaned = cleaned[2:]
    if len(cleaned) != 10:
        raise InvalidPhoneNumber("Invalid phone number format")
    return cleaned


def to_international_number(phone_number, country_code="91"):
    """
    Digits with country code and no '+', as the WhatsApp Cloud API expects.
    Ten digit numbers are assumed to be Indian.
    """
    cleaned = digits_only(phone_number)
    if len(cleaned) == 10:
        cleaned = country_code + cleaned
    return cleaned


def to_e164(phone_number, country_code="91"):
    return "+" + to_international_number(phone_number, country_code)

from django.core.exceptions import ValidationError
from rest_framework import exceptions


def error_message(error) -> str:
    """Plain message for a Django ValidationError, ``str()`` renders a list."""
    if isinstance(error, ValidationError):
        return " ".join(error.messages)
    return str(error)


class ModelValidationMixin:
    """
    For model viewsets whose models run ``clean()`` in ``save()``. The model
    error becomes a 400 ``{"error": ...}`` response instead of a 500.
    """

    def perform_create(self, serializer):
        try:
            super().perform_create(serializer)
        except ValidationError as e:
            raise exceptions.ValidationError({"error": error_message(e)})

    def perform_update(self, serializer):
        try:
            super().perform_update(serializer)
        except ValidationError as e:
            raise exceptions.ValidationError({"error": error_message(e)})

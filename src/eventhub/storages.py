from django.core.files.storage import default_storage
from storages.backends.s3boto3 import S3Boto3Storage
from eventhub.settings import USE_S3, PRIVATE_MEDIA_LOCATION


class PrivateMediaStorage(S3Boto3Storage):
    location = PRIVATE_MEDIA_LOCATION
    default_acl = "private"  # Private access
    file_overwrite = False
    custom_domain = False  # No public access


def private_storage():
    """Storage for certificate templates; local media storage unless USE_S3 is set."""
    if USE_S3:
        return PrivateMediaStorage()
    return default_storage

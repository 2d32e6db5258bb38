import logging
import botocore
import botocore.exceptions
import botocore.session
from aws_secretsmanager_caching import SecretCache, SecretCacheConfig

logger = logging.getLogger(__name__)


class AWSSecretsManager:
    def __init__(self, region_name, access_key=None, secret_key=None):
        session = botocore.session.get_session()
        self.client = session.create_client(
            "secretsmanager",
            region_name=region_name,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
        )
        self.cache = SecretCache(config=SecretCacheConfig(), client=self.client)

    def get_secret(self, secret_name):
        try:
            return self.cache.get_secret_string(secret_name)
        except botocore.exceptions.ClientError as e:
            logger.warning("Could not read secret %s from AWS: %s", secret_name, e)
            return None


class SecretManager:
    """
    Looks a secret up in AWS Secrets Manager when one is configured and falls
    back to the environment otherwise.
    """

    def __init__(self, aws_secrets_manager=None, env=None):
        self.env = env
        self.aws_secrets_manager = aws_secrets_manager

    def get_secret(self, secret_name, default=None):
        if self.aws_secrets_manager is not None:
            secret = self.aws_secrets_manager.get_secret(secret_name)
            if secret is not None:
                return secret
        return self.env(secret_name, default=default)

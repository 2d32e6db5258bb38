from unittest.mock import MagicMock
import pytest
from base.helpers.code import generate_promo_code
from base.helpers.errors import error_message
from django.core.exceptions import ValidationError
from eventhub.secrets import SecretManager


@pytest.mark.django_db
def test_health_check(api_client):
    response = api_client.get("/api/healthz/")
    assert response.status_code == 200
    assert response.data["status"] == "OK"


@pytest.mark.django_db
def test_unknown_route_is_json(client, settings):
    settings.DEBUG = False
    response = client.get("/nowhere/")
    assert response.status_code == 404


def test_promo_code_shape():
    code = generate_promo_code(prefix="save-")
    assert code.startswith("SAVE-")
    assert len(code) == 13
    assert code == code.upper()


def test_error_message_joins_messages():
    assert error_message(ValidationError(["First", "Second"])) == "First Second"
    assert error_message(ValueError("plain")) == "plain"


def test_secret_manager_prefers_aws():
    aws = MagicMock()
    aws.get_secret.side_effect = lambda name: {"RAZORPAY_API_KEY": "from-aws"}.get(name)
    env = MagicMock(side_effect=lambda name, default=None: default)
    secrets = SecretManager(aws_secrets_manager=aws, env=env)
    assert secrets.get_secret("RAZORPAY_API_KEY") == "from-aws"
    assert secrets.get_secret("BREVO_API_KEY", default="fallback") == "fallback"
    assert SecretManager(env=env).get_secret("X", default="d") == "d"

import pytest
from base.auth import JwtAuthentication
from base.helpers.jwt import encode_jwt
from base.models import TeamMember, TeamRole


@pytest.mark.django_db
class TestLogin:
    def test_login_returns_token(self, api_client, admin_member):
        response = api_client.post(
            "/api/auth/login/", {"email": "ADMIN@eventhub.test", "password": "secret123"}
        )
        assert response.status_code == 200
        assert response.data["member"]["role"] == TeamRole.ADMIN
        member_id = JwtAuthentication().get_member_id_from_jwt_token(response.data["Jwt"])
        assert member_id == admin_member.member_id

    def test_login_updates_last_active(self, api_client, admin_member):
        api_client.post(
            "/api/auth/login/", {"email": admin_member.email, "password": "secret123"}
        )
        admin_member.refresh_from_db()
        assert admin_member.last_active is not None

    def test_wrong_password(self, api_client, admin_member):
        response = api_client.post(
            "/api/auth/login/", {"email": admin_member.email, "password": "nope"}
        )
        assert response.status_code == 401
        assert response.data["detail"] == "Invalid email or password"

    def test_inactive_member_cannot_log_in(self, api_client, admin_member):
        admin_member.is_active = False
        admin_member.save()
        response = api_client.post(
            "/api/auth/login/", {"email": admin_member.email, "password": "secret123"}
        )
        assert response.status_code == 401


@pytest.mark.django_db
class TestJwtHeader:
    def test_me(self, staff_client, staff_member):
        response = staff_client.get("/api/auth/me/")
        assert response.status_code == 200
        assert response.data["email"] == staff_member.email

    def test_me_without_token(self, api_client):
        assert api_client.get("/api/auth/me/").status_code in (401, 403)

    def test_garbage_token(self, api_client):
        api_client.credentials(HTTP_JWT="not-a-token")
        response = api_client.get("/api/auth/me/")
        assert response.status_code == 401
        assert response.data["detail"] == "Invalid JWT Token"

    def test_expired_token(self, api_client, admin_member):
        token = encode_jwt(
            {"member_id": admin_member.member_id, "auth_backend": "member"}, expires_in=-10
        )
        api_client.credentials(HTTP_JWT=token)
        response = api_client.get("/api/auth/me/")
        assert response.status_code == 401
        assert response.data["detail"] == "Token has expired"

    def test_token_missing_backend(self, api_client, admin_member):
        api_client.credentials(HTTP_JWT=encode_jwt({"member_id": admin_member.member_id}))
        response = api_client.get("/api/auth/me/")
        assert response.status_code == 401
        assert response.data["detail"] == "Missing field: auth_backend"


@pytest.mark.django_db
class TestTeamAdmin:
    def test_admin_creates_member(self, admin_client):
        response = admin_client.post(
            "/api/admin/team/",
            {
                "name": "Gate Scanner",
                "email": "Gate@Example.com",
                "password": "scanme1",
                "role": "scanner",
                "event_ids": [],
            },
            format="json",
        )
        assert response.status_code == 201
        member = TeamMember.objects.get(email="gate@example.com")
        assert member.check_password("scanme1")
        assert "password" not in response.data

    def test_duplicate_email(self, admin_client, staff_member):
        response = admin_client.post(
            "/api/admin/team/",
            {"name": "Dup", "email": staff_member.email.upper(), "password": "secret1", "role": "staff"},
            format="json",
        )
        assert response.status_code == 400
        assert "email" in response.data

    def test_staff_cannot_manage_team(self, staff_client):
        assert staff_client.get("/api/admin/team/").status_code == 403

    def test_invite_without_email_relay(self, admin_client):
        response = admin_client.post(
            "/api/admin/team/invite/",
            {"name": "New", "email": "new@example.com", "password": "pw123456", "role": "staff"},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["demo"] is True

    def test_invite_sends_mail(self, admin_client, monkeypatch, mailoutbox):
        monkeypatch.setattr("base.notifications.email.BREVO_API_KEY", "key")
        monkeypatch.setattr("base.notifications.email.BREVO_SENDER_EMAIL", "team@eventhub.test")
        monkeypatch.setattr("base.views.team.is_email_configured", lambda: True)
        response = admin_client.post(
            "/api/admin/team/invite/",
            {"name": "Gate", "email": "gate@example.com", "password": "pw123456", "role": "scanner"},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["message"] == "Invitation sent"
        assert len(mailoutbox) == 1
        html = mailoutbox[0].alternatives[0][0]
        assert "/checkin" in html
        assert "pw123456" in html


class TestRoles:
    def test_event_scope(self):
        member = TeamMember(role=TeamRole.STAFF, event_ids=["abc"])
        assert member.can_access_event("abc")
        assert not member.can_access_event("other")

    def test_unscoped_member_sees_everything(self):
        assert TeamMember(role=TeamRole.SCANNER, event_ids=[]).can_access_event("any")

    def test_admin_ignores_scope(self):
        assert TeamMember(role=TeamRole.ADMIN, event_ids=["abc"]).can_access_event("other")

    def test_permissions_by_role(self):
        assert TeamMember(role=TeamRole.MANAGER).can_manage()
        assert not TeamMember(role=TeamRole.STAFF).can_manage()
        assert TeamMember(role=TeamRole.STAFF).can_edit_attendees()
        assert not TeamMember(role=TeamRole.SCANNER).can_edit_attendees()

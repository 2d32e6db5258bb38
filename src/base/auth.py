import jwt as pyjwt
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from .models import TeamMember
from .helpers.jwt import decode_jwt, encode_jwt


class JwtAuthentication(BaseAuthentication):
    """
    Authenticates team members with a signed token passed in the ``Jwt`` header.
    Requests without the header stay anonymous so public endpoints keep working.
    """

    key = "member"
    header = "Jwt"
    REQUIRED_FIELDS = ["member_id", "auth_backend"]

    def authenticate_header(self, request):
        return self.header

    def get_member_id_from_jwt_token(self, token: str) -> int:
        try:
            data = decode_jwt(token)
        except pyjwt.ExpiredSignatureError as exc:
            raise AuthenticationFailed("Token has expired") from exc
        except pyjwt.InvalidTokenError as exc:
            raise AuthenticationFailed("Invalid JWT Token") from exc
        for field in self.REQUIRED_FIELDS:
            if field not in data:
                raise AuthenticationFailed(f"Missing field: {field}")
        if data["auth_backend"] != self.key:
            raise AuthenticationFailed("Invalid JWT Token")
        return data["member_id"]

    def generate_jwt_token(self, member: TeamMember) -> str:
        payload = {
            "member_id": member.member_id,
            "role": member.role,
            "auth_backend": self.key,
        }
        return encode_jwt(payload)

    def login(self, email: str, password: str) -> TeamMember:
        try:
            member = TeamMember.objects.get_by_email(email)
        except TeamMember.DoesNotExist as exc:
            raise AuthenticationFailed("Invalid email or password") from exc
        if not member.is_active or not member.check_password(password):
            raise AuthenticationFailed("Invalid email or password")
        member.touch()
        return member

    def authenticate(self, request):
        token = request.headers.get(self.header)
        if not token:
            return None
        member_id = self.get_member_id_from_jwt_token(token)
        try:
            member = TeamMember.objects.get(member_id=member_id, is_active=True)
        except TeamMember.DoesNotExist as exc:
            raise AuthenticationFailed("Member not found or inactive") from exc
        return (member, None)

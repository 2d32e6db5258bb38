from django.db import models
from django.contrib.auth.hashers import make_password, check_password
from django.core.exceptions import ValidationError
from django.utils.timezone import now


class TeamRole(models.TextChoices):
    ADMIN = "admin", "Admin"
    MANAGER = "manager", "Manager"
    STAFF = "staff", "Staff"
    SCANNER = "scanner", "Scanner"


ROLE_DESCRIPTIONS = {
    TeamRole.ADMIN: "Full access to all features",
    TeamRole.MANAGER: "Manage events, view analytics, manage tickets",
    TeamRole.STAFF: "View events, manage attendees",
    TeamRole.SCANNER: "Check-in attendees only",
}


class TeamMemberManager(models.Manager):
    def create_member(self, email: str, password: str, **extra_fields) -> "TeamMember":
        if not email:
            raise ValueError("The email must be set")
        member = self.model(email=email.strip().lower(), **extra_fields)
        member.set_password(password)
        member.save()
        return member

    def get_by_email(self, email: str) -> "TeamMember":
        return self.get(email__iexact=email.strip())


class TeamMember(models.Model):
    member_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=255, unique=True)
    password = models.CharField(max_length=128)
    role = models.CharField(
        max_length=20, choices=TeamRole.choices, default=TeamRole.STAFF
    )
    # Empty list means the member can work on every event.
    event_ids = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    last_active = models.DateTimeField(null=True, blank=True)

    objects = TeamMemberManager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} <{self.email}> ({self.role})"

    @property
    def is_authenticated(self):
        return True

    @property
    def is_anonymous(self):
        return False

    def clean(self):
        if not isinstance(self.event_ids, list):
            raise ValidationError("event_ids must be a list")
        self.event_ids = [str(event_id) for event_id in self.event_ids]

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        return check_password(raw_password, self.password)

    def touch(self):
        self.last_active = now()
        self.save(update_fields=["last_active"])

    def can_manage(self):
        return self.role in (TeamRole.ADMIN, TeamRole.MANAGER)

    def can_edit_attendees(self):
        return self.role != TeamRole.SCANNER

    def can_access_event(self, event_id):
        if self.role == TeamRole.ADMIN or not self.event_ids:
            return True
        return str(event_id) in self.event_ids

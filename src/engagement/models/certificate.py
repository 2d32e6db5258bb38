from django.db import models
from ticketing.models import Event


class CertificateType(models.TextChoices):
    PARTICIPANT = "participant", "Participant"
    VOLUNTEER = "volunteer", "Volunteer"
    WINNER = "winner", "Winner"


class Certificate(models.Model):
    certificate_id = models.AutoField(primary_key=True)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="certificates")
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    type = models.CharField(
        max_length=20, choices=CertificateType.choices, default=CertificateType.PARTICIPANT
    )
    download_url = models.CharField(max_length=1000, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} ({self.type}) - {self.event.name}"

    @classmethod
    def delete_for_event(cls, event_id, type=None):
        queryset = cls.objects.filter(event_id=event_id)
        if type:
            queryset = queryset.filter(type=type)
        deleted, _ = queryset.delete()
        return deleted

from django.db import models
from django.utils.timezone import now
from .event import Event


class WaitlistEntry(models.Model):
    entry_id = models.AutoField(primary_key=True)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="waitlist")
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True, default="")
    notified = models.BooleanField(default=False)
    notified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        unique_together = [["event", "email"]]

    def __str__(self):
        return f"{self.name} <{self.email}> - {self.event.name}"

    @classmethod
    def pending_for_event(cls, event):
        return cls.objects.filter(event=event, notified=False)

    @classmethod
    def mark_notified(cls, entries):
        ids = [entry.entry_id for entry in entries]
        return cls.objects.filter(entry_id__in=ids).update(notified=True, notified_at=now())

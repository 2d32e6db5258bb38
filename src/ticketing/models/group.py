from django.db import models
from django.core.exceptions import ValidationError
from django.db.models import Count, Q
from .event import Event


class Group(models.Model):
    group_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=255)
    contact_name = models.CharField(max_length=255)
    contact_email = models.EmailField()
    contact_phone = models.CharField(max_length=20, blank=True, default="")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="groups")
    discount = models.PositiveIntegerField(default=0, help_text="Percent off")
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} - {self.event.name}"

    def clean(self):
        if not 0 <= self.discount <= 100:
            raise ValidationError("Group discount must be between 0 and 100")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def discount_for(self, amount):
        return amount * self.discount // 100

    @classmethod
    def with_ticket_counts(cls):
        return cls.objects.select_related("event").annotate(
            ticket_count=Count("tickets"),
            paid_count=Count("tickets", filter=Q(tickets__status="paid")),
        )

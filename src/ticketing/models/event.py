import uuid
from datetime import datetime, time, timedelta
from django.db import models
from django.db.models import F, Prefetch
from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.timezone import now
from eventhub.storages import private_storage


class EventCategory(models.TextChoices):
    MUSIC = "music", "Music"
    TECH = "tech", "Tech"
    ART = "art", "Art"
    SPORTS = "sports", "Sports"
    FOOD = "food", "Food"
    GAMING = "gaming", "Gaming"
    BUSINESS = "business", "Business"
    OTHER = "other", "Other"


class Event(models.Model):
    event_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    date = models.DateField()
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    venue = models.CharField(max_length=255)
    address = models.TextField(blank=True, default="")
    # Amounts are in paise.
    price = models.PositiveIntegerField(default=0)
    capacity = models.PositiveIntegerField(default=0, help_text="0 means unlimited")
    sold_count = models.PositiveIntegerField(default=0)
    category = models.CharField(
        max_length=20, choices=EventCategory.choices, default=EventCategory.OTHER
    )
    image_url = models.URLField(max_length=1000, blank=True, default="")
    organizer = models.CharField(max_length=255, blank=True, default="")
    contact_email = models.EmailField(blank=True, default="")
    contact_phone = models.CharField(max_length=20, blank=True, default="")
    terms_and_conditions = models.TextField(blank=True, default="")
    registration_deadline = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)
    early_bird_enabled = models.BooleanField(default=False)
    early_bird_price = models.PositiveIntegerField(null=True, blank=True)
    early_bird_deadline = models.DateTimeField(null=True, blank=True)
    send_reminders = models.BooleanField(default=True)
    certificate_template = models.FileField(
        upload_to="certificate_templates/",
        storage=private_storage,
        blank=True,
        null=True,
    )
    certificate_settings = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "start_time"]

    def __str__(self) -> str:
        return self.name

    def clean(self):
        if self.early_bird_enabled and self.early_bird_price is None:
            raise ValidationError("Early bird price is required when early bird is enabled")
        if self.early_bird_price is not None and self.early_bird_price > self.price:
            raise ValidationError("Early bird price cannot be more than the regular price")
        if self.start_time and self.end_time and self.start_time > self.end_time:
            raise ValidationError("Event start time must be before event end time")
        if self.certificate_settings is None:
            self.certificate_settings = {}
        if not isinstance(self.certificate_settings, dict):
            raise ValidationError("Certificate settings must be an object")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def is_early_bird_active(self, at=None):
        if not self.early_bird_enabled or self.early_bird_price is None:
            return False
        at = at or now()
        return self.early_bird_deadline is None or at <= self.early_bird_deadline

    def current_price(self, at=None):
        if self.is_early_bird_active(at):
            return self.early_bird_price
        return self.price

    @property
    def seats_left(self):
        if not self.capacity:
            return None
        return max(self.capacity - self.sold_count, 0)

    @property
    def is_sold_out(self):
        return bool(self.capacity) and self.sold_count >= self.capacity

    def has_capacity_for(self, quantity):
        if not self.capacity:
            return True
        return self.sold_count + quantity <= self.capacity

    def is_registration_open(self):
        if not self.is_active:
            return False
        return self.registration_deadline is None or now() <= self.registration_deadline

    def starts_at(self):
        start = datetime.combine(self.date, self.start_time or time(0, 0))
        return timezone.make_aware(start)

    def ends_at(self):
        if self.end_time:
            return timezone.make_aware(datetime.combine(self.date, self.end_time))
        return self.starts_at() + timedelta(hours=2)

    def increment_sold(self, quantity=1):
        Event.objects.filter(pk=self.pk).update(sold_count=F("sold_count") + quantity)
        self.refresh_from_db(fields=["sold_count"])

    def decrement_sold(self, quantity=1):
        # Counter stays at zero instead of going negative.
        Event.objects.filter(pk=self.pk, sold_count__gte=quantity).update(
            sold_count=F("sold_count") - quantity
        )
        self.refresh_from_db(fields=["sold_count"])

    def duplicate(self):
        copy = Event.objects.get(pk=self.pk)
        copy.pk = None
        copy.event_id = uuid.uuid4()
        copy._state.adding = True
        copy.name = f"{self.name} (Copy)"
        copy.sold_count = 0
        copy.save()
        return copy

    @classmethod
    def get_active_qs(cls):
        return cls.objects.filter(is_active=True)

    @classmethod
    def lock_event(cls, event_id):
        try:
            return cls.objects.select_for_update().get(pk=event_id)
        except ValidationError:
            raise cls.DoesNotExist("Event not found")


class Festival(models.Model):
    festival_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    start_date = models.DateField()
    end_date = models.DateField()
    image_url = models.URLField(max_length=1000, blank=True, default="")
    events = models.ManyToManyField(Event, related_name="festivals", blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["start_date"]

    def __str__(self):
        return self.name

    def clean(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError("Festival start date must be before festival end date")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    @classmethod
    def get_active_qs(cls):
        return cls.objects.filter(is_active=True).prefetch_related(
            Prefetch("events", queryset=Event.get_active_qs())
        )

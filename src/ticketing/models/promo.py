from django.db import models
from django.db.models import F
from django.core.exceptions import ValidationError
from django.utils.timezone import now
from base.helpers.code import generate_promo_code
from .event import Event


class DiscountType(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed"


class PromoCode(models.Model):
    promo_id = models.AutoField(primary_key=True)
    code = models.CharField(max_length=50, unique=True, blank=True)
    discount_type = models.CharField(
        max_length=20, choices=DiscountType.choices, default=DiscountType.PERCENTAGE
    )
    # Percent (0-100) or paise depending on the discount type.
    discount_value = models.PositiveIntegerField()
    max_uses = models.PositiveIntegerField(default=100)
    used_count = models.PositiveIntegerField(default=0)
    events = models.ManyToManyField(Event, related_name="promo_codes", blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.code

    def clean(self):
        self.code = (self.code or "").strip().upper() or generate_promo_code()
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValidationError("Percentage discount must be between 0 and 100")
        if self.max_uses < 1:
            raise ValidationError("Max uses must be at least 1")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def is_expired(self):
        return self.expires_at is not None and self.expires_at <= now()

    def applies_to(self, event):
        # A code without events is valid for every event.
        if not self.events.exists():
            return True
        return self.events.filter(pk=event.pk).exists()

    def assert_usable(self, event):
        if not self.is_active:
            raise ValidationError("Promo code is not active")
        if self.is_expired():
            raise ValidationError("Promo code has expired")
        if self.used_count >= self.max_uses:
            raise ValidationError("Promo code usage limit reached")
        if event is not None and not self.applies_to(event):
            raise ValidationError("Promo code is not valid for this event")

    def discount_for(self, price):
        if self.discount_type == DiscountType.PERCENTAGE:
            discount = price * self.discount_value // 100
        else:
            discount = self.discount_value
        return min(discount, price)

    def redeem(self):
        updated = PromoCode.objects.filter(
            pk=self.pk, used_count__lt=F("max_uses")
        ).update(used_count=F("used_count") + 1)
        self.refresh_from_db(fields=["used_count"])
        return bool(updated)

    @classmethod
    def get_by_code(cls, code):
        return cls.objects.filter(code__iexact=(code or "").strip()).first()

from django.db import models
from django.db.models import F
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from ticketing.models import Event


class Photo(models.Model):
    photo_id = models.AutoField(primary_key=True)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="photos")
    image_url = models.URLField(max_length=1000)
    uploader_name = models.CharField(max_length=255)
    caption = models.CharField(max_length=500, blank=True, default="")
    is_approved = models.BooleanField(default=False)
    likes = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Photo by {self.uploader_name} - {self.event.name}"

    def approve(self, approved=True):
        self.is_approved = approved
        self.save(update_fields=["is_approved"])

    def like(self):
        Photo.objects.filter(pk=self.pk).update(likes=F("likes") + 1)
        self.refresh_from_db(fields=["likes"])
        return self.likes


class Review(models.Model):
    review_id = models.AutoField(primary_key=True)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="reviews")
    user_name = models.CharField(max_length=255)
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user_name} ({self.rating}/5) - {self.event.name}"

    def clean(self):
        if not 1 <= self.rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

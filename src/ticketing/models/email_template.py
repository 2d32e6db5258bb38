import re
from django.db import models

PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


class EmailTemplateType(models.TextChoices):
    CONFIRMATION = "confirmation", "Confirmation"
    REMINDER = "reminder", "Reminder"
    THANKYOU = "thankyou", "Thank You"
    CUSTOM = "custom", "Custom"


DEFAULT_TEMPLATES = [
    {
        "name": "Ticket Confirmation",
        "type": EmailTemplateType.CONFIRMATION,
        "subject": "Your Ticket for {{eventName}}",
        "body": (
            "<p>Hi <strong>{{name}}</strong>,</p>"
            "<p>Your registration for <strong>{{eventName}}</strong> has been confirmed!</p>"
            "<p><strong>Date:</strong> {{eventDate}} {{eventTime}}<br>"
            "<strong>Venue:</strong> {{eventVenue}}<br>"
            "<strong>Ticket ID:</strong> {{ticketId}}</p>"
            "<p>See you there!<br>{{siteName}}</p>"
        ),
    },
    {
        "name": "Event Reminder",
        "type": EmailTemplateType.REMINDER,
        "subject": "Reminder: {{eventName}} is Tomorrow!",
        "body": (
            "<p>Hi <strong>{{name}}</strong>,</p>"
            "<p>Just a friendly reminder that <strong>{{eventName}}</strong> is happening tomorrow!</p>"
            "<p><strong>Date:</strong> {{eventDate}} {{eventTime}}<br>"
            "<strong>Venue:</strong> {{eventVenue}}</p>"
            "<p>Don't forget to bring your ticket QR code.<br>{{siteName}}</p>"
        ),
    },
    {
        "name": "Thank You",
        "type": EmailTemplateType.THANKYOU,
        "subject": "Thanks for attending {{eventName}}",
        "body": (
            "<p>Hi <strong>{{name}}</strong>,</p>"
            "<p>Thank you for attending <strong>{{eventName}}</strong>. We hope you had a great time!</p>"
            "<p>We would love your feedback: <a href=\"{{surveyLink}}\">take the survey</a>.</p>"
            "<p>{{siteName}}</p>"
        ),
    },
]


class EmailTemplate(models.Model):
    template_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=255)
    type = models.CharField(
        max_length=20, choices=EmailTemplateType.choices, default=EmailTemplateType.CUSTOM
    )
    subject = models.CharField(max_length=500)
    body = models.TextField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["template_id"]

    def __str__(self):
        return f"{self.name} ({self.type})"

    @staticmethod
    def render_text(text, context):
        """
        Replace ``{{placeholder}}`` markers with values from ``context``.
        Unknown placeholders are left untouched.
        """

        def replace(match):
            key = match.group(1)
            if key in context:
                return str(context[key])
            return match.group(0)

        return PLACEHOLDER_RE.sub(replace, text)

    def render(self, context):
        return self.render_text(self.subject, context), self.render_text(self.body, context)

    @classmethod
    def seed_defaults(cls):
        if cls.objects.exists():
            return []
        return [cls.objects.create(**template) for template in DEFAULT_TEMPLATES]

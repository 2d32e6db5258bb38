from django.db import models, transaction
from django.db.models import F
from django.core.exceptions import ValidationError
from django.utils.timezone import now
from ticketing.models import Event


class QuestionType(models.TextChoices):
    POLL = "poll", "Poll"
    QNA = "qna", "Q&A"


class PollQuestion(models.Model):
    """
    Live poll or Q&A question submitted by an attendee. Nothing is shown
    publicly until a team member approves it.
    """

    question_id = models.AutoField(primary_key=True)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="poll_questions")
    type = models.CharField(max_length=10, choices=QuestionType.choices)
    question = models.TextField()
    asker_name = models.CharField(max_length=255)
    asker_email = models.EmailField(blank=True, default="")
    options = models.JSONField(default=list, blank=True)
    # One counter per option, same order as options.
    votes = models.JSONField(default=list, blank=True)
    upvotes = models.PositiveIntegerField(default=0)
    is_approved = models.BooleanField(default=False)
    is_featured = models.BooleanField(default=False)
    is_answered = models.BooleanField(default=False)
    answers = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-is_featured", "-upvotes", "-created_at"]

    def __str__(self):
        return f"{self.get_type_display()}: {self.question[:50]}"

    def clean(self):
        if not isinstance(self.options, list):
            raise ValidationError("Options must be a list")
        self.options = [str(option) for option in self.options]
        if self.type != QuestionType.POLL:
            self.votes = []
        elif len(self.votes) != len(self.options):
            self.votes = [0] * len(self.options)

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def is_poll(self):
        return self.type == QuestionType.POLL

    def approve(self, approved=True):
        self.is_approved = approved
        self.save(update_fields=["is_approved"])

    def feature(self, featured=True):
        self.is_featured = featured
        self.save(update_fields=["is_featured"])

    def edit(self, question=None, options=None):
        if question:
            self.question = question
        if options is not None and self.is_poll():
            if not isinstance(options, list):
                raise ValidationError("Options must be a list")
            # Changing the options invalidates every vote cast so far.
            self.options = options
            self.votes = [0] * len(options)
        self.save()

    def vote(self, option_index):
        if not self.is_poll():
            raise ValidationError("Voting is only available for polls")
        with transaction.atomic():
            locked = PollQuestion.objects.select_for_update().get(pk=self.pk)
            if (
                not isinstance(option_index, int)
                or isinstance(option_index, bool)
                or not 0 <= option_index < len(locked.options)
            ):
                raise ValidationError("Invalid option")
            votes = list(locked.votes)
            votes[option_index] += 1
            locked.votes = votes
            locked.save(update_fields=["votes"])
        self.votes = locked.votes
        return self.votes

    def upvote(self):
        PollQuestion.objects.filter(pk=self.pk).update(upvotes=F("upvotes") + 1)
        self.refresh_from_db(fields=["upvotes"])
        return self.upvotes

    def add_answer(self, text, author_name):
        if self.type != QuestionType.QNA:
            raise ValidationError("Only Q&A questions can be answered")
        if not text or not author_name:
            raise ValidationError("Answer text and author name are required")
        self.answers = list(self.answers) + [
            {"text": text, "author_name": author_name, "created_at": now().isoformat()}
        ]
        self.is_answered = True
        self.save(update_fields=["answers", "is_answered"])

    @classmethod
    def for_event(cls, event_id, type=None, approved_only=True):
        queryset = cls.objects.filter(event_id=event_id)
        if type:
            queryset = queryset.filter(type=type)
        if approved_only:
            queryset = queryset.filter(is_approved=True)
        return queryset

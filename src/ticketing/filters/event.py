import django_filters
from ticketing.models import Event, EventCategory, Ticket, TicketStatus


class EventFilter(django_filters.FilterSet):
    date__gte = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date__lte = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    category = django_filters.MultipleChoiceFilter(
        choices=EventCategory.choices,
        conjoined=False,  # OR filtering, e.g. music or tech
    )
    search = django_filters.CharFilter(field_name="name", lookup_expr="icontains")

    class Meta:
        model = Event
        fields = ["category", "is_featured", "is_active"]


class TicketFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=TicketStatus.choices)
    search = django_filters.CharFilter(method="filter_search")

    def filter_search(self, queryset, name, value):
        return queryset.filter(name__icontains=value) | queryset.filter(
            email__icontains=value
        )

    class Meta:
        model = Ticket
        fields = ["event", "status", "checked_in", "group", "payment_gateway"]

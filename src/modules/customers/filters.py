import django_filters

from modules.customers.models import Customer
from shared.domain.normalizers import digits_only


class CustomerFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    phone = django_filters.CharFilter(method="filter_phone")
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")
    active = django_filters.BooleanFilter(field_name="is_active")
    min_total_spent = django_filters.NumberFilter(
        field_name="total_spent", lookup_expr="gte"
    )

    class Meta:
        model = Customer
        fields = ["name", "phone", "email", "active", "min_total_spent"]

    def filter_phone(self, queryset, name, value):
        return queryset.filter(phone__contains=digits_only(value))

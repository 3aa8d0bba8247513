import django_filters

from modules.coupons.models import Coupon


class CouponFilter(django_filters.FilterSet):
    code = django_filters.CharFilter(field_name="code", lookup_expr="icontains")
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    discount_type = django_filters.CharFilter(
        field_name="discount_type", lookup_expr="iexact"
    )

    class Meta:
        model = Coupon
        fields = ["code", "status", "discount_type"]

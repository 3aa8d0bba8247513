"""Shipping URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.shipping.views import ShippingViewSet

router = DefaultRouter(trailing_slash=True)
router.register("shipping", ShippingViewSet, basename="shipping")

urlpatterns = router.urls

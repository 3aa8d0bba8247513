from django.urls import path

from modules.core.views import health_check, service_status

urlpatterns = [
    path("", service_status, name="service_status"),
    path("health", health_check, name="health_check"),
]

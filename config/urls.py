"""
URL configuration for the POS discount service.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("discounts/", include("apps.discounts.urls")),
]

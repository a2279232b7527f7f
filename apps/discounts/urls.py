"""
URL configuration for discounts app.
"""

from django.urls import path

from . import views

app_name = "discounts"

urlpatterns = [
    # Campaign Management API
    path("api/discount-sets/", views.DiscountSetListCreateView.as_view(), name="discount_set_list"),
    path(
        "api/discount-sets/<uuid:id>/",
        views.DiscountSetDetailView.as_view(),
        name="discount_set_detail",
    ),
    path(
        "api/discount-sets/<uuid:id>/toggle/",
        views.toggle_discount_set_activation,
        name="discount_set_toggle",
    ),
    # POS API
    path("api/calculate/", views.calculate_discounts, name="calculate_discounts"),
]

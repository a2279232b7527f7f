"""
Pytest configuration and fixtures for the POS discount service.
"""

import pytest


@pytest.fixture
def api_client():
    """
    Fixture for Django REST framework API client.
    """
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def authenticated_client(api_client, django_user_model):
    """
    Fixture for authenticated API client.
    """
    user = django_user_model.objects.create_user(
        username="testuser", email="test@example.com", password="testpass123"
    )
    api_client.force_authenticate(user=user)
    return api_client, user


@pytest.fixture
def rule_payload():
    """
    Factory fixture for a rule configuration in its persisted JSON form.
    """

    def make(name="Rule", type="percentage", value=10, **extra):
        payload = {"isEnabled": True, "name": name, "type": type, "value": value}
        payload.update(extra)
        return payload

    return make


@pytest.fixture
def soap_campaign_payload(rule_payload):
    """
    Campaign with a buy-2-get-1 soap promotion and a 5% cart rule over 5000.
    """
    return {
        "name": "Weekend Promo",
        "isActive": True,
        "isDefault": True,
        "isOneTimePerTransaction": False,
        "buyGetRulesJson": [
            {
                "buyProductId": "SOAP",
                "buyQuantity": 2,
                "getProductId": "SOAP",
                "getQuantity": 1,
                "discountType": "percentage",
                "discountValue": 100,
                "isRepeatable": False,
            }
        ],
        "globalCartPriceRuleJson": rule_payload(
            name="Big Basket", value=5, conditionMin=5000, applyFixedOnce=True
        ),
        "productConfigurations": [
            {
                "productId": "TOOTHPASTE",
                "productName": "Toothpaste 100g",
                "isActiveForProductInCampaign": True,
                "lineItemValueRuleJson": rule_payload(name="Paste Deal", type="fixed", value=5),
            }
        ],
    }

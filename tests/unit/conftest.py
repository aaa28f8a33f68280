import pytest
from unittest.mock import AsyncMock, patch

from packages.billing.models.domain.payment import CheckoutSessionResult
from packages.billing.providers.payment.interface import PaymentProviderInterface


@pytest.fixture
def mock_payment_provider():
    """Create a mock Stripe provider for testing."""
    provider = AsyncMock(spec=PaymentProviderInterface)
    provider.create_customer = AsyncMock(return_value="cus_new")
    provider.find_customer_by_email = AsyncMock(return_value=None)
    provider.create_subscription_item = AsyncMock(return_value="si_addon")
    provider.create_checkout_session = AsyncMock(
        return_value=CheckoutSessionResult(
            checkout_session_id="cs_test_1",
            checkout_url="https://checkout.stripe.com/c/pay/cs_test_1",
        )
    )
    provider.create_portal_session = AsyncMock(
        return_value="https://billing.stripe.com/p/session/test_1"
    )
    provider.list_recurring_prices = AsyncMock(return_value=[])
    provider.health_check = AsyncMock(return_value=True)
    return provider


@pytest.fixture(autouse=True)
def mock_get_payment_provider(mock_payment_provider):
    """Automatically mock get_payment_provider for all unit tests."""
    with patch(
        "packages.billing.services.checkout_service.get_payment_provider",
        return_value=mock_payment_provider,
    ), patch(
        "packages.billing.services.portal_service.get_payment_provider",
        return_value=mock_payment_provider,
    ), patch(
        "packages.billing.services.plans_service.get_payment_provider",
        return_value=mock_payment_provider,
    ), patch(
        "packages.billing.webhooks.stripe_webhook.get_payment_provider",
        return_value=mock_payment_provider,
    ), patch(
        "api.v1.routes.health.get_payment_provider",
        return_value=mock_payment_provider,
    ):
        yield

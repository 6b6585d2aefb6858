"""
Shared fixtures for all tests.

factory-boy factories and fake collaborators live here so both unit/ and
integration/ can import them. No test touches the network: the gateway,
email and CRM collaborators are replaced by in-memory fakes.
"""
from unittest.mock import patch

import factory
import pytest
from django.test import Client

from checkout.crm import CrmResult
from checkout.exceptions import GatewayError
from checkout.gateway import PaymentLink
from checkout.intake import Address, CheckoutSubmission, Order, PaymentMethod, encode_order_payload
from checkout.notifications import EmailResult
from checkout.services import ReconciliationCoordinator
from checkout.stores import DedupLedger, PendingOrderStore


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class AddressFactory(factory.Factory):
    class Meta:
        model = Address

    province = 'San José'
    canton = 'Escazú'
    district = 'San Rafael'
    line = '200m norte de la iglesia'


class SubmissionFactory(factory.Factory):
    class Meta:
        model = CheckoutSubmission

    name = 'María Pérez'
    phone = '8888-8888'
    email = 'maria@example.com'
    address = factory.SubFactory(AddressFactory)
    quantity = 1
    source = 'storefront'


class OrderFactory(factory.Factory):
    class Meta:
        model = Order

    order_id = factory.Sequence(lambda n: f'{20000000 + n}')
    name = 'María Pérez'
    phone = '8888-8888'
    email = 'maria@example.com'
    address = factory.SubFactory(AddressFactory)
    quantity = 3
    subtotal = 39900
    shipping_cost = 0
    total = 39900
    payment_method = PaymentMethod.CARD


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------

class FakeEmailService:
    """Records every order it is asked to email."""

    def __init__(self, sent=True, error=None):
        self.sent = sent
        self.error = error
        self.orders = []

    def send_order_email(self, order):
        self.orders.append(order)
        if self.error is not None:
            raise self.error
        return EmailResult(sent=self.sent, detail='' if self.sent else 'provider down')


class FakeCrmSync:
    """Stands in for CrmSyncDispatcher; one entry per sync sequence."""

    def __init__(self, result=None, error=None):
        self.result = result or CrmResult(success=True, crm_order_id='CRM-1', attempts=1)
        self.error = error
        self.orders = []

    def sync(self, order):
        self.orders.append(order)
        if self.error is not None:
            raise self.error
        return self.result


class FakeGateway:

    def __init__(self, error=None):
        self.error = error
        self.orders = []

    def create_payment_link(self, order):
        self.orders.append(order)
        if self.error is not None:
            raise self.error
        return PaymentLink(payment_url=f'https://pay.example/{order.order_id}', transaction_id='TX-100')


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def crm_sync():
    return FakeCrmSync()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def webhook_secret():
    """Override in a test module to run the coordinator with a secret."""
    return ''


@pytest.fixture
def coordinator(email_service, crm_sync, gateway, webhook_secret):
    return ReconciliationCoordinator(
        ledger=DedupLedger(),
        pending_orders=PendingOrderStore(),
        email_service=email_service,
        crm_sync=crm_sync,
        gateway=gateway,
        webhook_secret=webhook_secret,
    )


@pytest.fixture
def api_client(coordinator):
    """Django test client wired to the fixture coordinator."""
    with patch('checkout.views.get_coordinator', return_value=coordinator):
        yield Client()


@pytest.fixture
def storefront_payload():
    """Minimal valid checkout form, as the storefront posts it."""
    return {
        'nombre': 'María Pérez',
        'telefono': '8888-8888',
        'email': 'maria@example.com',
        'provincia': 'San José',
        'canton': 'Escazú',
        'distrito': 'San Rafael',
        'direccion': '200m norte de la iglesia',
        'cantidad': '3',
        'comentarios': 'Entregar en la tarde',
    }


@pytest.fixture
def pending_order():
    return OrderFactory()


@pytest.fixture
def return_data(pending_order):
    return encode_order_payload(pending_order)

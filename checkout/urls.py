from django.urls import path
from .views import (
    BankTransferOrderView,
    ConfirmPaymentView,
    CreatePaymentView,
    HealthView,
    WebhookView,
)

urlpatterns = [
    path('health/', HealthView.as_view(), name='health'),
    path('payments/create-payment/', CreatePaymentView.as_view(), name='payment-create'),
    path('payments/confirm/', ConfirmPaymentView.as_view(), name='payment-confirm'),
    path('payments/webhook/', WebhookView.as_view(), name='payment-webhook'),
    path('orders/bank-transfer/', BankTransferOrderView.as_view(), name='order-bank-transfer'),
]

from django.urls import path
from . import views

app_name = 'settlements'

urlpatterns = [
    # Calculated on demand
    # GET    /api/trips/{trip_id}/balances/        - Balances + suggested plan
    # GET    /api/trips/{trip_id}/balances/me/     - Current user's totals
    path('trips/<uuid:trip_id>/balances/', views.trip_balances, name='trip-balances'),
    path('trips/<uuid:trip_id>/balances/me/', views.my_trip_balance, name='my-trip-balance'),

    # Persisted plan
    # GET    /api/trips/{trip_id}/settlements/     - List settlements with payments
    # POST   /api/trips/{trip_id}/settlements/     - Persist current plan
    path('trips/<uuid:trip_id>/settlements/', views.trip_settlements, name='trip-settlements'),

    # Payments
    # POST   /api/settlements/{id}/payments/              - Record payment
    # DELETE /api/settlements/{id}/payments/{payment_id}/ - Delete payment
    path(
        'settlements/<uuid:settlement_id>/payments/',
        views.settlement_payments,
        name='settlement-payments'
    ),
    path(
        'settlements/<uuid:settlement_id>/payments/<uuid:payment_id>/',
        views.settlement_payment_detail,
        name='settlement-payment-detail'
    ),
]

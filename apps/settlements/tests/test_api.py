import pytest
from decimal import Decimal
from uuid import uuid4
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.settlements.models import Settlement, SettlementStatus, Payment
from apps.settlements.services import persist_settlement_plan, record_payment


# =============================================================================
# Balances
# =============================================================================

@pytest.mark.django_db
class TestTripBalances:
    """Tests for GET /api/trips/{trip_id}/balances/"""

    def test_member_gets_balances(self, alice_client, trip, ledger, alice, bob, carol):
        url = reverse('settlements:trip-balances', kwargs={'trip_id': trip.id})
        response = alice_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['tripId'] == str(trip.id)
        assert response.data['baseCurrency'] == 'EUR'
        assert response.data['totalSpent'] == '110.00'

        balances = {b['memberId']: b for b in response.data['balances']}
        assert balances[str(alice.id)]['memberName'] == 'Alice'
        assert balances[str(alice.id)]['totalPaid'] == '90.00'
        assert balances[str(alice.id)]['totalOwedShare'] == '30.00'
        assert balances[str(alice.id)]['netBalance'] == '60.00'
        assert balances[str(carol.id)]['netBalance'] == '-40.00'

    def test_settlement_plan(self, bob_client, trip, ledger, alice, bob, carol):
        url = reverse('settlements:trip-balances', kwargs={'trip_id': trip.id})
        response = bob_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        first, second = response.data['settlements']
        assert first['fromMemberId'] == str(carol.id)
        assert first['fromMemberName'] == 'Carol'
        assert first['toMemberId'] == str(alice.id)
        assert first['toMemberName'] == 'Alice'
        assert first['amount'] == '40.00'
        assert str(first['oldestDebtDate']) == '2024-05-01'
        assert second['fromMemberId'] == str(bob.id)
        assert second['amount'] == '20.00'

    def test_empty_trip(self, alice_client, trip):
        url = reverse('settlements:trip-balances', kwargs={'trip_id': trip.id})
        response = alice_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['totalSpent'] == '0.00'
        assert response.data['balances'] == []
        assert response.data['settlements'] == []

    def test_outsider_forbidden(self, outsider_client, trip):
        url = reverse('settlements:trip-balances', kwargs={'trip_id': trip.id})
        response = outsider_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unauthenticated(self, api_client, trip):
        url = reverse('settlements:trip-balances', kwargs={'trip_id': trip.id})
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_unknown_trip(self, alice_client):
        url = reverse('settlements:trip-balances', kwargs={'trip_id': uuid4()})
        response = alice_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestMyTripBalance:
    """Tests for GET /api/trips/{trip_id}/balances/me/"""

    def test_own_totals(self, bob_client, trip, ledger):
        url = reverse('settlements:my-trip-balance', kwargs={'trip_id': trip.id})
        response = bob_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'userOwes': '30.00', 'userIsOwed': '10.00'}

    def test_outsider_forbidden(self, outsider_client, trip):
        url = reverse('settlements:my-trip-balance', kwargs={'trip_id': trip.id})
        response = outsider_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Persisted settlements
# =============================================================================

@pytest.mark.django_db
class TestTripSettlements:
    """Tests for GET/POST /api/trips/{trip_id}/settlements/"""

    def test_create_plan(self, alice_client, trip, ledger, alice, carol):
        url = reverse('settlements:trip-settlements', kwargs={'trip_id': trip.id})
        response = alice_client.post(url)

        assert response.status_code == status.HTTP_201_CREATED
        assert len(response.data) == 2
        first = response.data[0]
        assert first['fromUser']['id'] == str(carol.id)
        assert first['toUser']['displayName'] == 'Alice'
        assert first['amount'] == '40.00'
        assert first['status'] == SettlementStatus.PENDING
        assert first['totalPaid'] == '0.00'
        assert first['remainingAmount'] == '40.00'
        assert first['notes'] == 'Debt since 2024-05-01'

    def test_list_includes_payments(self, bob_client, trip, ledger, alice, carol):
        settlement = persist_settlement_plan(trip_id=trip.id, created_by=alice)[0]
        record_payment(
            settlement_id=settlement.id,
            amount=Decimal('15.00'),
            paid_at=timezone.now(),
            recorded_by=carol,
        )

        url = reverse('settlements:trip-settlements', kwargs={'trip_id': trip.id})
        response = bob_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        listed = {s['id']: s for s in response.data}[str(settlement.id)]
        assert listed['status'] == SettlementStatus.PARTIALLY_PAID
        assert listed['totalPaid'] == '15.00'
        assert listed['remainingAmount'] == '25.00'
        assert len(listed['payments']) == 1
        assert listed['payments'][0]['recordedBy']['email'] == 'carol@example.com'

    def test_outsider_forbidden(self, outsider_client, trip):
        url = reverse('settlements:trip-settlements', kwargs={'trip_id': trip.id})

        assert outsider_client.get(url).status_code == status.HTTP_403_FORBIDDEN
        assert outsider_client.post(url).status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Payments
# =============================================================================

@pytest.fixture
def settlement(trip, ledger, alice):
    """Pending carol -> alice settlement of 40.00."""
    return persist_settlement_plan(trip_id=trip.id, created_by=alice)[0]


@pytest.mark.django_db
class TestSettlementPayments:
    """Tests for POST /api/settlements/{id}/payments/"""

    def test_record_payment(self, alice_client, settlement, alice):
        url = reverse('settlements:settlement-payments', kwargs={'settlement_id': settlement.id})
        response = alice_client.post(url, {
            'amount': '12.50',
            'paymentMethod': 'Cash',
            'paymentReference': 'R-1',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['payment']['amount'] == '12.50'
        assert response.data['payment']['paymentMethod'] == 'Cash'
        assert response.data['payment']['recordedBy']['id'] == str(alice.id)
        assert response.data['settlement']['status'] == SettlementStatus.PARTIALLY_PAID
        assert response.data['settlement']['remainingAmount'] == '27.50'

    def test_full_payment_marks_paid(self, alice_client, settlement):
        url = reverse('settlements:settlement-payments', kwargs={'settlement_id': settlement.id})
        response = alice_client.post(url, {'amount': '40.00'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['settlement']['status'] == SettlementStatus.PAID

    def test_overpayment_rejected(self, alice_client, settlement):
        url = reverse('settlements:settlement-payments', kwargs={'settlement_id': settlement.id})
        response = alice_client.post(url, {'amount': '50.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Payment.objects.filter(settlement=settlement).exists()

    def test_payment_on_paid_settlement_rejected(self, alice_client, settlement):
        url = reverse('settlements:settlement-payments', kwargs={'settlement_id': settlement.id})
        alice_client.post(url, {'amount': '40.00'}, format='json')
        response = alice_client.post(url, {'amount': '1.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_zero_amount_rejected(self, alice_client, settlement):
        url = reverse('settlements:settlement-payments', kwargs={'settlement_id': settlement.id})
        response = alice_client.post(url, {'amount': '0.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'amount' in response.data

    def test_outsider_forbidden(self, outsider_client, settlement):
        url = reverse('settlements:settlement-payments', kwargs={'settlement_id': settlement.id})
        response = outsider_client.post(url, {'amount': '10.00'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_settlement(self, alice_client, db):
        url = reverse('settlements:settlement-payments', kwargs={'settlement_id': uuid4()})
        response = alice_client.post(url, {'amount': '10.00'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestSettlementPaymentDetail:
    """Tests for DELETE /api/settlements/{id}/payments/{payment_id}/"""

    def test_delete_payment(self, alice_client, settlement, carol):
        payment, _ = record_payment(
            settlement_id=settlement.id,
            amount=Decimal('40.00'),
            paid_at=timezone.now(),
            recorded_by=carol,
        )

        url = reverse('settlements:settlement-payment-detail', kwargs={
            'settlement_id': settlement.id,
            'payment_id': payment.id,
        })
        response = alice_client.delete(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == SettlementStatus.PENDING
        assert Settlement.objects.get(id=settlement.id).status == SettlementStatus.PENDING

    def test_unknown_payment(self, alice_client, settlement):
        url = reverse('settlements:settlement-payment-detail', kwargs={
            'settlement_id': settlement.id,
            'payment_id': uuid4(),
        })
        response = alice_client.delete(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestHealthCheck:

    def test_health_check(self, api_client):
        response = api_client.get('/api/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'healthy'

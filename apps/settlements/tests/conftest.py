import pytest
from datetime import date
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.trips.services import create_trip, add_trip_member, create_expense


def authenticated_client(user):
    """Return a new API client authenticated as user."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def alice(db):
    """Trip owner; pays for dinner."""
    return User.objects.create_user(
        email='alice@example.com',
        password='TestPass123!',
        display_name='Alice',
    )


@pytest.fixture
def bob(db):
    """Trip member; pays for the taxi."""
    return User.objects.create_user(
        email='bob@example.com',
        password='TestPass123!',
        display_name='Bob',
    )


@pytest.fixture
def carol(db):
    """Trip member who pays for nothing."""
    return User.objects.create_user(
        email='carol@example.com',
        password='TestPass123!',
        display_name='Carol',
    )


@pytest.fixture
def outsider(db):
    """User not on the trip."""
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        display_name='Outsider',
    )


@pytest.fixture
def alice_client(alice):
    return authenticated_client(alice)


@pytest.fixture
def bob_client(bob):
    return authenticated_client(bob)


@pytest.fixture
def outsider_client(outsider):
    return authenticated_client(outsider)


@pytest.fixture
def trip(db, alice, bob, carol):
    """EUR trip owned by alice with bob and carol as members."""
    trip = create_trip(name='Lisbon', owner=alice, base_currency='EUR')
    add_trip_member(trip_id=trip.id, user=bob)
    add_trip_member(trip_id=trip.id, user=carol)
    return trip


@pytest.fixture
def dinner(trip, alice, bob, carol):
    """Alice pays 90.00, split equally three ways."""
    expense, _ = create_expense(
        trip_id=trip.id,
        paid_by=alice,
        amount=Decimal('90.00'),
        date=date(2024, 5, 1),
        description='Dinner',
        split_members=[alice.id, bob.id, carol.id],
    )
    return expense


@pytest.fixture
def taxi(trip, bob, carol):
    """Bob pays 20.00, 10.00 each for bob and carol."""
    expense, _ = create_expense(
        trip_id=trip.id,
        paid_by=bob,
        amount=Decimal('20.00'),
        date=date(2024, 5, 2),
        description='Taxi',
        split_type='custom',
        custom_shares={bob.id: Decimal('10.00'), carol.id: Decimal('10.00')},
    )
    return expense


@pytest.fixture
def ledger(dinner, taxi):
    """
    Dinner + taxi.

    Net balances: alice +60.00, bob -20.00, carol -40.00.
    Plan: carol -> alice 40.00, bob -> alice 20.00.
    """
    return [dinner, taxi]

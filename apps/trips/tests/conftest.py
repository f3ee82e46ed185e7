import pytest
from apps.accounts.models import User
from apps.trips.services import create_trip, add_trip_member


@pytest.fixture
def trip_owner(db):
    """Create and return a test user (trip owner)."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Trip Owner',
    )


@pytest.fixture
def trip_member(db):
    """Create and return a second traveller."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Trip Member',
    )


@pytest.fixture
def third_member(db):
    """Create and return a third traveller."""
    return User.objects.create_user(
        email='third@example.com',
        password='TestPass123!',
        display_name='Third Member',
    )


@pytest.fixture
def non_member(db):
    """Create and return a user not on the trip."""
    return User.objects.create_user(
        email='nonmember@example.com',
        password='TestPass123!',
        display_name='Non Member',
    )


@pytest.fixture
def trip(db, trip_owner, trip_member, third_member):
    """EUR trip with owner and two members."""
    trip = create_trip(name='Alps', owner=trip_owner, base_currency='eur')
    add_trip_member(trip_id=trip.id, user=trip_member)
    add_trip_member(trip_id=trip.id, user=third_member)
    return trip

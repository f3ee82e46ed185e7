from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid

from apps.settlements.money import normalize_amount


class TripRole(models.TextChoices):
    OWNER = 'owner', 'Owner'
    ADMIN = 'admin', 'Admin'
    MEMBER = 'member', 'Member'


class RsvpStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    GOING = 'going', 'Going'
    MAYBE = 'maybe', 'Maybe'
    NOT_GOING = 'not_going', 'Not going'


class ExpenseStatus(models.TextChoices):
    OPEN = 'open', 'Open'
    CLOSED = 'closed', 'Closed'


class SplitType(models.TextChoices):
    EQUAL = 'equal', 'Equal'
    CUSTOM = 'custom', 'Custom'
    PERCENTAGE = 'percentage', 'Percentage'


class ActiveManager(models.Manager):
    """Hide soft-deleted rows."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class Trip(models.Model):
    """A shared trip with members, expenses and a base currency."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    base_currency = models.CharField(max_length=3, default='USD')
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='owned_trips'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = models.Manager()
    active = ActiveManager()

    class Meta:
        db_table = 'trips'
        indexes = [
            models.Index(fields=['owner', 'created_at'], name='trips_owner_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def has_member(self, user):
        return self.memberships.filter(user=user).exists()

    def get_user_role(self, user):
        try:
            return self.memberships.get(user=user).role
        except TripMember.DoesNotExist:
            return None


class TripMember(models.Model):
    """User membership in a trip with role and RSVP."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='trip_memberships'
    )
    role = models.CharField(max_length=20, choices=TripRole.choices, default=TripRole.MEMBER)
    rsvp = models.CharField(max_length=20, choices=RsvpStatus.choices, default=RsvpStatus.PENDING)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'trip_members'
        unique_together = [['trip', 'user']]
        indexes = [
            models.Index(fields=['trip', 'role'], name='trip_members_trip_role_idx'),
        ]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.trip.name} ({self.role})"

    def save(self, *args, **kwargs):
        if self.trip.owner_id == self.user_id:
            self.role = TripRole.OWNER
        super().save(*args, **kwargs)


class Expense(models.Model):
    """Money spent by one member on behalf of the trip."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='expenses')
    paid_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='expenses_paid'
    )
    description = models.CharField(max_length=200, blank=True)

    # Financial details
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    currency = models.CharField(max_length=3)
    # Captured at entry time, never refreshed
    fx_rate = models.DecimalField(
        max_digits=14,
        decimal_places=6,
        default=Decimal('1'),
        validators=[MinValueValidator(Decimal('0.000001'))]
    )
    normalized_amount = models.DecimalField(max_digits=12, decimal_places=2, editable=False)

    date = models.DateField()
    status = models.CharField(max_length=10, choices=ExpenseStatus.choices, default=ExpenseStatus.OPEN)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = models.Manager()
    active = ActiveManager()

    class Meta:
        db_table = 'expenses'
        indexes = [
            models.Index(fields=['trip', 'date'], name='expenses_trip_date_idx'),
            models.Index(fields=['paid_by', 'date'], name='expenses_paid_by_date_idx'),
        ]
        ordering = ['date', 'created_at']

    def __str__(self):
        return f"{self.description or 'Expense'} - {self.amount} {self.currency}"

    def save(self, *args, **kwargs):
        """Normalize into the trip's base currency."""
        self.normalized_amount = normalize_amount(self.amount, self.fx_rate)
        super().save(*args, **kwargs)

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.save(update_fields=['deleted_at', 'updated_at'])


class ShareAssignment(models.Model):
    """A member's portion of an expense."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(Expense, on_delete=models.CASCADE, related_name='assignments')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='share_assignments'
    )

    # In expense currency
    share_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    # In trip base currency
    normalized_share_amount = models.DecimalField(max_digits=12, decimal_places=2, editable=False)
    split_type = models.CharField(max_length=20, choices=SplitType.choices, default=SplitType.EQUAL)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'share_assignments'
        unique_together = [['expense', 'user']]
        indexes = [
            models.Index(fields=['user'], name='share_assign_user_idx'),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.user.get_display_name()} owes {self.share_amount} ({self.split_type})"

    def save(self, *args, **kwargs):
        """Normalize with the parent expense's fixed rate unless already given."""
        if self.normalized_share_amount is None:
            self.normalized_share_amount = normalize_amount(self.share_amount, self.expense.fx_rate)
        super().save(*args, **kwargs)

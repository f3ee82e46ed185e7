from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db.models import Sum
from decimal import Decimal
import uuid


class SettlementStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PARTIALLY_PAID = 'partially_paid', 'Partially paid'
    PAID = 'paid', 'Paid'
    VERIFIED = 'verified', 'Verified'


class Settlement(models.Model):
    """A suggested transfer that members have acted on."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey('trips.Trip', on_delete=models.CASCADE, related_name='settlements')
    from_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='settlements_owed'
    )
    to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='settlements_due'
    )

    # In trip base currency
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    status = models.CharField(
        max_length=20,
        choices=SettlementStatus.choices,
        default=SettlementStatus.PENDING
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'settlements'
        indexes = [
            models.Index(fields=['trip', 'status'], name='settlements_trip_status_idx'),
            models.Index(fields=['from_user', 'status'], name='settlements_from_status_idx'),
            models.Index(fields=['to_user', 'status'], name='settlements_to_status_idx'),
        ]
        ordering = ['status', '-created_at']

    def __str__(self):
        return (
            f"{self.from_user.get_display_name()} -> {self.to_user.get_display_name()}: "
            f"{self.amount} ({self.status})"
        )

    def get_total_paid(self):
        """Sum of recorded payments."""
        return self.payments.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')

    def get_remaining_amount(self):
        return self.amount - self.get_total_paid()


class Payment(models.Model):
    """A real-world payment logged against a settlement."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    settlement = models.ForeignKey(Settlement, on_delete=models.CASCADE, related_name='payments')

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    paid_at = models.DateTimeField()
    payment_method = models.CharField(max_length=50, blank=True)
    payment_reference = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='payments_recorded'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'settlement_payments'
        indexes = [
            models.Index(fields=['settlement', 'paid_at'], name='payments_settlement_paid_idx'),
        ]
        ordering = ['-paid_at']

    def __str__(self):
        return f"{self.amount} towards {self.settlement_id}"

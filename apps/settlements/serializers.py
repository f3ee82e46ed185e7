from decimal import Decimal, ROUND_HALF_UP

from rest_framework import serializers

from apps.accounts.models import User
from .models import Settlement, Payment


def money_field(**kwargs):
    """2-dp money output, rounded half-up like every other money path."""
    return serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        rounding=ROUND_HALF_UP,
        **kwargs
    )


# =============================================================================
# Input Serializers
# =============================================================================

class RecordPaymentInputSerializer(serializers.Serializer):
    """
    Validate input for recording a payment against a settlement.

    Fields:
        amount (Decimal): Amount paid in the trip's base currency
        paidAt (datetime): When it was paid (defaults to now)
        paymentMethod (str): Optional, e.g. 'Cash'
        paymentReference (str): Optional transaction reference
        notes (str): Optional note
    """

    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.01')
    )
    paidAt = serializers.DateTimeField(required=False)
    paymentMethod = serializers.CharField(max_length=50, required=False, allow_blank=True)
    paymentReference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)


# =============================================================================
# Output Serializers
# =============================================================================

class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    displayName = serializers.SerializerMethodField()
    photoURL = serializers.URLField(source='photo_url', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'displayName', 'photoURL']
        read_only_fields = fields

    def get_displayName(self, obj):
        return obj.get_display_name()


class MemberNameMixin:
    """Resolve member display names from the 'members' context directory."""

    def member_name(self, member_id):
        user = self.context.get('members', {}).get(member_id)
        return user.get_display_name() if user else None


class MemberBalanceSerializer(MemberNameMixin, serializers.Serializer):
    memberId = serializers.UUIDField(source='member_id')
    memberName = serializers.SerializerMethodField()
    totalPaid = money_field(source='total_paid')
    totalOwedShare = money_field(source='total_owed_share')
    netBalance = money_field(source='net_balance')

    def get_memberName(self, obj):
        return self.member_name(obj.member_id)


class SettlementTransferSerializer(MemberNameMixin, serializers.Serializer):
    fromMemberId = serializers.UUIDField(source='from_member')
    fromMemberName = serializers.SerializerMethodField()
    toMemberId = serializers.UUIDField(source='to_member')
    toMemberName = serializers.SerializerMethodField()
    amount = money_field()
    oldestDebtDate = serializers.DateField(source='oldest_debt_date', allow_null=True)

    def get_fromMemberName(self, obj):
        return self.member_name(obj.from_member)

    def get_toMemberName(self, obj):
        return self.member_name(obj.to_member)


class TripBalanceSummarySerializer(serializers.Serializer):
    """Serializer for the calculator's TripBalanceSummary."""

    tripId = serializers.UUIDField(source='trip_id')
    baseCurrency = serializers.CharField(source='base_currency')
    totalSpent = money_field(source='total_spent')
    balances = MemberBalanceSerializer(many=True)
    settlements = SettlementTransferSerializer(many=True)
    calculatedAt = serializers.DateTimeField(source='calculated_at')


class UserBalanceSerializer(serializers.Serializer):
    userOwes = money_field(source='user_owes')
    userIsOwed = money_field(source='user_is_owed')


class PaymentSerializer(serializers.ModelSerializer):
    """Serializer for recorded payments."""

    paidAt = serializers.DateTimeField(source='paid_at', read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True)
    paymentReference = serializers.CharField(source='payment_reference', read_only=True)
    recordedBy = UserMinimalSerializer(source='recorded_by', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id',
            'amount',
            'paidAt',
            'paymentMethod',
            'paymentReference',
            'notes',
            'recordedBy',
            'createdAt',
        ]
        read_only_fields = fields


class SettlementSerializer(serializers.ModelSerializer):
    """Persisted settlement with payment totals."""

    tripId = serializers.UUIDField(source='trip_id', read_only=True)
    fromUser = UserMinimalSerializer(source='from_user', read_only=True)
    toUser = UserMinimalSerializer(source='to_user', read_only=True)
    totalPaid = serializers.SerializerMethodField()
    remainingAmount = serializers.SerializerMethodField()
    payments = PaymentSerializer(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Settlement
        fields = [
            'id',
            'tripId',
            'fromUser',
            'toUser',
            'amount',
            'status',
            'notes',
            'totalPaid',
            'remainingAmount',
            'payments',
            'createdAt',
            'updatedAt',
        ]
        read_only_fields = fields

    def _total_paid(self, obj):
        # Uses prefetched payments when available
        return sum((p.amount for p in obj.payments.all()), Decimal('0.00'))

    def get_totalPaid(self, obj):
        return f"{self._total_paid(obj):.2f}"

    def get_remainingAmount(self, obj):
        return f"{obj.amount - self._total_paid(obj):.2f}"

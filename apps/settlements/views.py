from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import serializers as drf_serializers
from drf_spectacular.utils import extend_schema

from .permissions import IsTripMember, IsSettlementTripMember
from .serializers import (
    TripBalanceSummarySerializer,
    UserBalanceSerializer,
    SettlementSerializer,
    PaymentSerializer,
    RecordPaymentInputSerializer,
)
from .services import (
    calculate_trip_balances,
    calculate_user_balance,
    get_member_directory,
    get_trip_settlements,
    persist_settlement_plan,
    record_payment,
    delete_payment,
)


# Response serializers for API documentation
class RecordPaymentResponseSerializer(drf_serializers.Serializer):
    payment = PaymentSerializer()
    settlement = SettlementSerializer()


@extend_schema(
    responses={200: TripBalanceSummarySerializer},
    description="Per-member balances and the suggested settlement plan for a trip.",
    tags=['settlements'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTripMember])
def trip_balances(request, trip_id):
    """
    Calculate balances and the settlement plan.

    GET /api/trips/{trip_id}/balances/
    """
    summary = calculate_trip_balances(trip_id)
    serializer = TripBalanceSummarySerializer(
        summary,
        context={'request': request, 'members': get_member_directory(summary)}
    )
    return Response(serializer.data)


@extend_schema(
    responses={200: UserBalanceSerializer},
    description="How much the current user owes and is owed on a trip.",
    tags=['settlements'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTripMember])
def my_trip_balance(request, trip_id):
    """GET /api/trips/{trip_id}/balances/me/"""
    balance = calculate_user_balance(trip_id, request.user.id)
    return Response(UserBalanceSerializer(balance).data)


@extend_schema(
    methods=['GET'],
    responses={200: SettlementSerializer(many=True)},
    description="Persisted settlements for a trip, with payments.",
    tags=['settlements'],
)
@extend_schema(
    methods=['POST'],
    request=None,
    responses={201: SettlementSerializer(many=True)},
    description="Replace pending settlements with the current suggested plan.",
    tags=['settlements'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsTripMember])
def trip_settlements(request, trip_id):
    """
    List or (re)create the persisted settlement plan.

    GET  /api/trips/{trip_id}/settlements/
    POST /api/trips/{trip_id}/settlements/
    """
    if request.method == 'POST':
        created = persist_settlement_plan(trip_id=trip_id, created_by=request.user)
        return Response(
            SettlementSerializer(created, many=True).data,
            status=status.HTTP_201_CREATED
        )

    settlements = get_trip_settlements(trip_id=trip_id)
    return Response(SettlementSerializer(settlements, many=True).data)


@extend_schema(
    request=RecordPaymentInputSerializer,
    responses={201: RecordPaymentResponseSerializer},
    description="Record a payment against a settlement.",
    tags=['settlements'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSettlementTripMember])
def settlement_payments(request, settlement_id):
    """
    Record a payment.

    POST /api/settlements/{settlement_id}/payments/
    Body: {"amount": "12.50", "paidAt": "...", "paymentMethod": "Cash"}
    """
    input_serializer = RecordPaymentInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)
    data = input_serializer.validated_data

    payment, settlement = record_payment(
        settlement_id=settlement_id,
        amount=data['amount'],
        paid_at=data.get('paidAt') or timezone.now(),
        recorded_by=request.user,
        payment_method=data.get('paymentMethod', ''),
        payment_reference=data.get('paymentReference', ''),
        notes=data.get('notes', ''),
    )

    return Response(
        {
            'payment': PaymentSerializer(payment).data,
            'settlement': SettlementSerializer(settlement).data,
        },
        status=status.HTTP_201_CREATED
    )


@extend_schema(
    responses={200: SettlementSerializer},
    description="Delete a payment and recompute the settlement status.",
    tags=['settlements'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsSettlementTripMember])
def settlement_payment_detail(request, settlement_id, payment_id):
    """DELETE /api/settlements/{settlement_id}/payments/{payment_id}/"""
    settlement = delete_payment(settlement_id=settlement_id, payment_id=payment_id)
    return Response(SettlementSerializer(settlement).data)

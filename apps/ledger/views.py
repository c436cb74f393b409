from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.cards.services import (
    get_card_access,
    AuthorizationError,
    CardNotFoundError,
)
from apps.ledger.models import Transaction

from .serializers import (
    TransactionSerializer,
    TransactionCreateSerializer,
    CommonExpenseSerializer,
    PeriodSerializer,
    PersonSerializer,
    GuestCreateSerializer,
    StatementSerializer,
)
from .services import (
    GuestStore,
    resolve_participants,
    list_transactions,
    get_change_token,
    create_common_expense,
    record_transaction,
    delete_transaction,
    build_statement,
    # Exceptions
    LedgerValidationError,
    StoreError,
    TransactionNotFoundError,
    GuestNotFoundError,
)


PERIOD_PARAMETERS = [
    OpenApiParameter('month', str, required=True, description='English month name, e.g. "March"'),
    OpenApiParameter('year', int, required=True),
]


def _store_unavailable(e):
    return Response(
        {'error': str(e), 'retry': True},
        status=status.HTTP_503_SERVICE_UNAVAILABLE
    )


@extend_schema(
    responses={200: PersonSerializer(many=True)},
    description="Owner, members and this device's guests for a card.",
    tags=['ledger'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def participants(request, card_id):
    """List everyone who can appear in the card's ledger."""
    try:
        card, _ = get_card_access(card_id=card_id, user=request.user)
        participant_list = resolve_participants(card.id, GuestStore(request.session))
    except CardNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response({
        'participants': PersonSerializer(participant_list.people, many=True).data,
        'warnings': participant_list.warnings,
    })


@extend_schema(
    request=GuestCreateSerializer,
    responses={201: PersonSerializer},
    description="Add a guest to this device's participant list for a card.",
    tags=['ledger'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def add_guest(request, card_id):
    """Add a device-local guest."""
    serializer = GuestCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        card, _ = get_card_access(card_id=card_id, user=request.user)
        account_names = [
            person.name for person in resolve_participants(card.id).people
        ]
        person = GuestStore(request.session).add(
            card.id,
            serializer.validated_data['name'],
            taken_names=account_names
        )
    except CardNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except LedgerValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(PersonSerializer(person).data, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={204: None},
    description="Remove a guest from this device's participant list.",
    tags=['ledger'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def remove_guest(request, card_id, guest_id):
    """Remove a device-local guest."""
    try:
        card, _ = get_card_access(card_id=card_id, user=request.user)
        GuestStore(request.session).remove(card.id, guest_id)
    except (CardNotFoundError, GuestNotFoundError) as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    methods=['GET'],
    parameters=PERIOD_PARAMETERS,
    responses={200: TransactionSerializer(many=True)},
    description="Transactions of one card for one month.",
    tags=['ledger'],
)
@extend_schema(
    methods=['POST'],
    request=TransactionCreateSerializer,
    responses={201: TransactionSerializer},
    description="Record a single transaction. Members may only record their own.",
    tags=['ledger'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def transactions(request, card_id):
    """List a period's transactions or record a new one."""
    try:
        card, role = get_card_access(card_id=card_id, user=request.user)
    except CardNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        period = PeriodSerializer(data=request.query_params)
        period.is_valid(raise_exception=True)
        try:
            entries = list_transactions(
                card.id,
                period.validated_data['month'],
                period.validated_data['year']
            )
        except StoreError as e:
            return _store_unavailable(e)
        return Response(TransactionSerializer(entries, many=True).data)

    serializer = TransactionCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        txn = record_transaction(
            card=card,
            user=request.user,
            role=role,
            **serializer.validated_data
        )
    except AuthorizationError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except LedgerValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except StoreError as e:
        return _store_unavailable(e)

    return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={204: None},
    description="Delete a transaction. Members may only delete their own.",
    tags=['ledger'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def transaction_detail(request, card_id, transaction_id):
    """Delete one transaction."""
    try:
        card, role = get_card_access(card_id=card_id, user=request.user)
        delete_transaction(
            card=card,
            user=request.user,
            role=role,
            transaction_id=transaction_id
        )
    except (CardNotFoundError, TransactionNotFoundError) as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except AuthorizationError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except StoreError as e:
        return _store_unavailable(e)

    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    request=CommonExpenseSerializer,
    responses={201: TransactionSerializer(many=True), 207: TransactionSerializer(many=True)},
    description=(
        "Split an expense equally between participants (owner only). "
        "Returns 207 when only some of the entries could be stored."
    ),
    tags=['ledger'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def common_expense(request, card_id):
    """Create one personal entry per participant for a shared expense."""
    serializer = CommonExpenseSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        card, role = get_card_access(card_id=card_id, user=request.user)
        participant_list = resolve_participants(card.id, GuestStore(request.session))
        result = create_common_expense(
            card=card,
            user=request.user,
            role=role,
            total_amount=data['total_amount'],
            description=data['description'],
            day=data['day'],
            month=data['month'],
            year=data['year'],
            participant_ids=data['participant_ids'],
            people=participant_list.people,
        )
    except CardNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except AuthorizationError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except LedgerValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except StoreError as e:
        return _store_unavailable(e)

    created = Transaction.objects.filter(id__in=result.created).order_by('spent_by')
    payload = {'created': TransactionSerializer(created, many=True).data}

    if result.warning is not None:
        payload['warning'] = str(result.warning)
        payload['failed'] = result.warning.failed_names
        return Response(payload, status=status.HTTP_207_MULTI_STATUS)

    return Response(payload, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=PERIOD_PARAMETERS,
    responses={200: StatementSerializer},
    description="Participants, balances, totals and transactions for one month.",
    tags=['ledger'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def statement(request, card_id):
    """Monthly statement for a card."""
    period = PeriodSerializer(data=request.query_params)
    period.is_valid(raise_exception=True)

    try:
        card, _ = get_card_access(card_id=card_id, user=request.user)
        result = build_statement(
            card=card,
            month=period.validated_data['month'],
            year=period.validated_data['year'],
            guest_store=GuestStore(request.session),
        )
    except CardNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except LedgerValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except StoreError as e:
        return _store_unavailable(e)

    return Response(StatementSerializer(result).data)


@extend_schema(
    parameters=[
        OpenApiParameter('token', str, required=False, description='Token returned by the previous poll'),
    ],
    description=(
        "Cheap change fingerprint of a card's ledger for polling clients. "
        "The token covers the row count, so deletions change it too."
    ),
    tags=['ledger'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def changes(request, card_id):
    """Report whether the card's ledger changed since the last poll."""
    try:
        card, _ = get_card_access(card_id=card_id, user=request.user)
        change = get_change_token(card.id)
    except CardNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except StoreError as e:
        return _store_unavailable(e)

    payload = {
        'token': change.token,
        'count': change.count,
        'latest_created_at': change.latest_created_at,
    }

    previous = request.query_params.get('token')
    if previous is not None:
        payload['changed'] = previous != change.token

    return Response(payload)

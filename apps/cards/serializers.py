from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from apps.cards.services import get_card_role
from .models import CreditCard, CardInvitation, CardMember


class CreditCardSerializer(serializers.ModelSerializer):
    """Main serializer for cards."""
    
    owner = UserMinimalSerializer(source='user', read_only=True)
    user_role = serializers.SerializerMethodField()
    
    class Meta:
        model = CreditCard
        fields = [
            'id',
            'card_name',
            'last_four_digits',
            'issuing_bank',
            'card_type',
            'is_primary',
            'owner',
            'user_role',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'is_primary', 'owner', 'created_at', 'updated_at']
    
    def get_user_role(self, obj):
        """Role annotated by get_user_cards, else resolved for the request user."""
        role = getattr(obj, 'user_role', None)
        if role is not None:
            return role
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return get_card_role(obj, request.user)
        return None


class CreditCardCreateSerializer(serializers.Serializer):
    """Input for creating a card."""
    
    card_name = serializers.CharField(max_length=100)
    last_four_digits = serializers.RegexField(
        r'^\d{4}$',
        error_messages={'invalid': 'Last four digits must be exactly 4 digits.'}
    )
    issuing_bank = serializers.CharField(max_length=100, required=False, allow_blank=True)
    card_type = serializers.CharField(max_length=50, required=False, allow_blank=True)


class CreditCardUpdateSerializer(serializers.Serializer):
    """Input for updating card metadata; all fields optional."""
    
    card_name = serializers.CharField(max_length=100, required=False)
    last_four_digits = serializers.RegexField(r'^\d{4}$', required=False)
    issuing_bank = serializers.CharField(max_length=100, required=False, allow_blank=True)
    card_type = serializers.CharField(max_length=50, required=False, allow_blank=True)


class CardMemberSerializer(serializers.Serializer):
    """A merged membership entry (record or shared e-mail)."""
    
    user = UserMinimalSerializer(read_only=True)
    role = serializers.CharField(read_only=True)
    source = serializers.CharField(read_only=True)


class CardMembershipSerializer(serializers.ModelSerializer):
    
    user = UserMinimalSerializer(read_only=True)
    
    class Meta:
        model = CardMember
        fields = ['id', 'credit_card', 'user', 'role', 'joined_at']
        read_only_fields = fields


class CardInvitationSerializer(serializers.ModelSerializer):
    
    inviter = UserMinimalSerializer(read_only=True)
    card_name = serializers.CharField(source='credit_card.card_name', read_only=True)
    is_expired = serializers.BooleanField(read_only=True)
    
    class Meta:
        model = CardInvitation
        fields = [
            'id',
            'credit_card',
            'card_name',
            'inviter',
            'invited_email',
            'role',
            'status',
            'invited_at',
            'expires_at',
            'accepted_at',
            'is_expired',
        ]
        read_only_fields = fields


class CreateInvitationSerializer(serializers.Serializer):
    
    email = serializers.EmailField()


class RemoveMemberSerializer(serializers.Serializer):
    
    user_id = serializers.UUIDField()

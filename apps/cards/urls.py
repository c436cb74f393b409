from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'cards'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.CreditCardViewSet, basename='card')

urlpatterns = [
    # Card ViewSet routes
    # GET    /api/cards/              - List user's cards
    # POST   /api/cards/              - Create card
    # GET    /api/cards/{id}/         - Get card details
    # PATCH  /api/cards/{id}/         - Update card (owner)
    # DELETE /api/cards/{id}/         - Delete card (owner)

    # Custom card actions
    # GET    /api/cards/{id}/members/        - List members
    # GET    /api/cards/{id}/invitations/    - Pending invitations (owner)
    # POST   /api/cards/{id}/invitations/    - Invite by email (owner)
    # POST   /api/cards/{id}/leave/          - Leave card
    # DELETE /api/cards/{id}/remove_member/  - Remove member (owner)

    # Invitation endpoints
    path('invitations/mine/', views.my_invitations, name='my-invitations'),
    path('invitations/<uuid:invitation_id>/accept/', views.accept_invitation_view, name='accept-invitation'),
    path('invitations/<uuid:invitation_id>/revoke/', views.revoke_invitation_view, name='revoke-invitation'),

    # Include router URLs
    path('', include(router.urls)),
]

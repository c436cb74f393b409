from django.urls import path
from . import views

app_name = 'ledger'

urlpatterns = [
    # Participants
    # GET    /api/cards/{id}/participants/                 - Owner, members, guests
    # POST   /api/cards/{id}/participants/guests/          - Add device-local guest
    # DELETE /api/cards/{id}/participants/guests/{gid}/    - Remove guest
    path('cards/<uuid:card_id>/participants/', views.participants, name='participants'),
    path('cards/<uuid:card_id>/participants/guests/', views.add_guest, name='add-guest'),
    path(
        'cards/<uuid:card_id>/participants/guests/<str:guest_id>/',
        views.remove_guest,
        name='remove-guest'
    ),

    # Transactions
    # GET    /api/cards/{id}/transactions/?month=&year=    - List period
    # POST   /api/cards/{id}/transactions/                 - Record one
    # DELETE /api/cards/{id}/transactions/{tid}/           - Delete one
    # POST   /api/cards/{id}/transactions/common/          - Split common expense (owner)
    # GET    /api/cards/{id}/transactions/changes/         - Change fingerprint
    path('cards/<uuid:card_id>/transactions/', views.transactions, name='transactions'),
    path('cards/<uuid:card_id>/transactions/common/', views.common_expense, name='common-expense'),
    path('cards/<uuid:card_id>/transactions/changes/', views.changes, name='transaction-changes'),
    path(
        'cards/<uuid:card_id>/transactions/<uuid:transaction_id>/',
        views.transaction_detail,
        name='transaction-detail'
    ),

    # Statement
    # GET    /api/cards/{id}/statement/?month=&year=
    path('cards/<uuid:card_id>/statement/', views.statement, name='statement'),
]

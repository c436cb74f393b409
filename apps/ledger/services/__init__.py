"""
Ledger app services layer.

Person registry, transaction store, common-split expansion and balance
calculation. Only the store touches ``Transaction`` rows; expansion and
balances are pure.
"""

from .exceptions import (
    LedgerServiceError,
    LedgerValidationError,
    StoreError,
    TransactionNotFoundError,
    GuestNotFoundError,
    PartialExpansionWarning,
)

from .people import (
    PersonRole,
    Person,
    ParticipantList,
    GuestStore,
    resolve_participants,
)

from .store import (
    list_transactions,
    create_transaction,
    append_transaction,
    remove_transaction,
    get_change_token,
)

from .splitting import (
    LeafTransaction,
    SplitResult,
    expand_common_expense,
    create_common_expense,
)

from .balances import (
    PersonBalance,
    BalanceSummary,
    attributed_to,
    compute_balances,
    summarize_balances,
)

from .recording import (
    record_transaction,
    delete_transaction,
)

from .statements import (
    Statement,
    build_statement,
)


__all__ = [
    # Exceptions
    'LedgerServiceError',
    'LedgerValidationError',
    'StoreError',
    'TransactionNotFoundError',
    'GuestNotFoundError',
    'PartialExpansionWarning',

    # Person Registry
    'PersonRole',
    'Person',
    'ParticipantList',
    'GuestStore',
    'resolve_participants',

    # Transaction Store
    'list_transactions',
    'create_transaction',
    'append_transaction',
    'remove_transaction',
    'get_change_token',

    # Common-Split Expander
    'LeafTransaction',
    'SplitResult',
    'expand_common_expense',
    'create_common_expense',

    # Balance Calculator
    'PersonBalance',
    'BalanceSummary',
    'attributed_to',
    'compute_balances',
    'summarize_balances',

    # Guarded writes
    'record_transaction',
    'delete_transaction',

    # Statements
    'Statement',
    'build_statement',
]

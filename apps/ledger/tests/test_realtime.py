import pytest

from apps.ledger.realtime import (
    DELETE,
    INSERT,
    ChangeEvent,
    LiveStatement,
    publish,
    subscribe,
)

from .factories import make_transaction


@pytest.fixture
def events(card):
    """Collect change events for the card."""
    received = []
    unsubscribe = subscribe(card.id, received.append)
    yield received
    unsubscribe()


@pytest.mark.django_db
class TestChangeFeed:

    def test_insert_published_after_commit(self, card, card_owner, events, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            txn = make_transaction(card, card_owner, 'Card Owner', '4.00')
            assert events == []

        assert len(events) == 1
        assert events[0].event_type == INSERT
        assert events[0].table == 'transactions'
        assert events[0].old is None
        assert events[0].new['id'] == str(txn.id)

    def test_delete_carries_old_row(self, card, card_owner, events, django_capture_on_commit_callbacks):
        txn = make_transaction(card, card_owner, 'Card Owner', '4.00')
        txn_id = str(txn.id)

        with django_capture_on_commit_callbacks(execute=True):
            txn.delete()

        assert events[-1].event_type == DELETE
        assert events[-1].old['id'] == txn_id
        assert events[-1].new is None

    def test_other_cards_are_not_notified(self, card, card_owner, django_capture_on_commit_callbacks):
        received = []
        unsubscribe = subscribe('some-other-card', received.append)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                make_transaction(card, card_owner, 'Card Owner', '4.00')
        finally:
            unsubscribe()

        assert received == []

    def test_unsubscribe(self, card):
        received = []
        unsubscribe = subscribe(card.id, received.append)
        event = ChangeEvent(event_type=INSERT, table='transactions', new={})

        publish(card.id, event)
        unsubscribe()
        publish(card.id, event)

        assert received == [event]

    def test_failing_subscriber_does_not_block_others(self, card):
        received = []

        def broken(event):
            raise RuntimeError('boom')

        first = subscribe(card.id, broken)
        second = subscribe(card.id, received.append)
        try:
            publish(card.id, ChangeEvent(event_type=INSERT, table='transactions', new={}))
        finally:
            first()
            second()

        assert len(received) == 1


@pytest.mark.django_db
class TestLiveStatement:

    def test_reloads_full_period_on_every_event(self, card, card_owner, django_capture_on_commit_callbacks):
        existing = make_transaction(card, card_owner, 'Card Owner', '1.00', day=1)

        with LiveStatement(card.id, 'March', 2024) as live:
            assert [t.id for t in live.transactions] == [existing.id]
            assert live.refresh_count == 1

            with django_capture_on_commit_callbacks(execute=True):
                added = make_transaction(card, card_owner, 'Card Member', '2.00', day=2)

            assert live.refresh_count == 2
            assert [t.id for t in live.transactions] == [added.id, existing.id]

            # Events from another period still trigger a reload
            with django_capture_on_commit_callbacks(execute=True):
                make_transaction(card, card_owner, 'Card Owner', '3.00', month='April')

            assert live.refresh_count == 3
            assert len(live.transactions) == 2

        with django_capture_on_commit_callbacks(execute=True):
            make_transaction(card, card_owner, 'Card Owner', '4.00')
        assert live.refresh_count == 3

    def test_uses_injected_loader(self, card):
        calls = []

        def loader(card_id, month, year):
            calls.append((card_id, month, year))
            return []

        live = LiveStatement(card.id, 'May', 2024, loader=loader).start()
        live.handle_event(ChangeEvent(event_type=DELETE, table='transactions', old={}))
        live.stop()

        assert calls == [(card.id, 'May', 2024)] * 2

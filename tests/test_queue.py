import sys
import os
import threading
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from message_queue import Channel, ChannelClosedError
from models import Transaction, TransactionType


def make_transaction(client_id: int, transaction_id: int) -> Transaction:
    return Transaction(
        transaction_type=TransactionType.DEPOSIT,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=Decimal("100"),
    )


class TestChannel:
    def test_publish_consume(self):
        channel = Channel()
        transaction = make_transaction(1, 1)
        channel.publish_message(transaction)
        result = channel.consume_message()
        assert result == transaction

    def test_consume_empty_returns_none(self):
        channel = Channel(timeout=0.01)
        result = channel.consume_message()
        assert result is None

    def test_is_empty(self):
        channel = Channel()
        assert channel.is_empty()
        channel.publish_message(make_transaction(1, 1))
        assert not channel.is_empty()
        channel.consume_message()
        assert channel.is_empty()

    def test_close(self):
        channel = Channel()
        assert not channel.is_closed()
        channel.close()
        assert channel.is_closed()

    def test_publish_after_close_raises(self):
        channel = Channel()
        channel.close()
        with pytest.raises(ChannelClosedError):
            channel.publish_message(make_transaction(1, 1))

    def test_publish_none_rejected(self):
        channel = Channel(timeout=0.01)
        with pytest.raises(ValueError):
            channel.publish_message(None)
        channel.close()
        assert channel.is_empty()
        assert list(channel) == []

    def test_iteration_drains_in_order_after_close(self):
        channel = Channel()
        transactions = [make_transaction(1, tx_id) for tx_id in range(1, 6)]
        for transaction in transactions:
            channel.publish_message(transaction)
        channel.close()

        assert list(channel) == transactions
        assert list(channel) == []

    def test_iteration_of_closed_empty_channel(self):
        channel = Channel(timeout=0.01)
        channel.close()
        assert list(channel) == []

    def test_bounded_channel_with_concurrent_publisher(self):
        channel = Channel(capacity=2, timeout=0.01)
        transactions = [make_transaction(1, tx_id) for tx_id in range(1, 51)]

        def publish():
            for transaction in transactions:
                channel.publish_message(transaction)
            channel.close()

        publisher = threading.Thread(target=publish)
        publisher.start()
        received = list(channel)
        publisher.join()

        assert received == transactions

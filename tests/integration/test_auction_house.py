"""
Integration tests for the auction house.

Tests the registry, clock-stamped routing and aggregate stats across
several independent auctions.
"""

import threading

import pytest

from mwa.core.auction import EventLog
from mwa.core.clock import ManualClock
from mwa.core.config import AuctionConfig
from mwa.core.errors import AuctionExpired, AuctionNotFound, BidTooLow, NotOwner
from mwa.core.house import AuctionHouse
from mwa.core.ledger import EscrowLedger


# =============================================================================
# Fixtures
# =============================================================================


def funded_ledger():
    return EscrowLedger({"alice": 1_000, "bob": 1_000, "carol": 1_000})


@pytest.fixture
def clock():
    return ManualClock(start=500)


@pytest.fixture
def events():
    return EventLog()


@pytest.fixture
def house(clock, events):
    return AuctionHouse(clock=clock, ledger_factory=funded_ledger, sink=events)


# =============================================================================
# Registry Tests
# =============================================================================


class TestRegistry:
    """Tests for creation and lookup."""

    def test_create_uses_clock(self, house):
        auction = house.create_auction("seller", AuctionConfig(duration=60))
        assert auction.opened_at == 500
        assert auction.expiry == 560
        assert auction.auction_id in house
        assert len(house) == 1

    def test_identical_auctions_get_distinct_ids(self, house):
        a = house.create_auction("seller", AuctionConfig(duration=60))
        b = house.create_auction("seller", AuctionConfig(duration=60))
        assert a.auction_id != b.auction_id
        assert len(house) == 2

    def test_get_unknown(self, house):
        with pytest.raises(AuctionNotFound):
            house.get(b"\x00" * 32)

    def test_not_found_is_key_error(self, house):
        with pytest.raises(KeyError):
            house.place_bid(b"\x01" * 32, "alice", 10)

    def test_explicit_ledger(self, house):
        ledger = EscrowLedger({"dave": 5})
        auction = house.create_auction("seller", ledger=ledger)
        assert auction.ledger is ledger

    def test_sink_shared(self, house, events):
        auction = house.create_auction("seller")
        house.place_bid(auction.auction_id, "alice", 10)
        assert events.last().auction_id == auction.auction_id


# =============================================================================
# Routing Tests
# =============================================================================


class TestRouting:
    """Tests for clock-stamped operations."""

    def test_full_lifecycle(self, house, clock):
        auction = house.create_auction("seller", AuctionConfig(duration=60, num_winners=2, bid_increment=1))
        aid = auction.auction_id

        house.place_bid(aid, "alice", 10)
        clock.advance(10)
        house.place_bid(aid, "bob", 12)
        with pytest.raises(BidTooLow):
            house.place_bid(aid, "carol", 13)
        house.place_bid(aid, "carol", 14)

        assert house.end_auction(aid, "seller") == ("carol", "bob")
        assert house.withdraw(aid, "seller") == 36
        assert auction.ledger.balance_of("seller") == 36

    def test_expiry_follows_clock(self, house, clock):
        auction = house.create_auction("seller", AuctionConfig(duration=60))
        clock.advance(60)
        with pytest.raises(AuctionExpired):
            house.place_bid(auction.auction_id, "alice", 10)

    def test_extension_through_house(self, house, clock):
        auction = house.create_auction("seller", AuctionConfig(duration=60))
        assert house.increase_duration(auction.auction_id, "seller", 30) == 590
        clock.advance(75)
        house.place_bid(auction.auction_id, "alice", 10)

    def test_owner_checks_apply(self, house):
        auction = house.create_auction("seller")
        with pytest.raises(NotOwner):
            house.end_auction(auction.auction_id, "alice")
        with pytest.raises(NotOwner):
            house.withdraw(auction.auction_id, "alice")

    def test_auctions_do_not_interfere(self, house):
        a = house.create_auction("seller", AuctionConfig(num_winners=1))
        b = house.create_auction("other", AuctionConfig(num_winners=1))

        house.place_bid(a.auction_id, "alice", 100)
        house.place_bid(b.auction_id, "alice", 1)
        house.end_auction(a.auction_id, "seller")

        assert a.winners == ("alice",)
        assert b.is_open
        assert b.highest_bid == 1


# =============================================================================
# Stats Tests
# =============================================================================


class TestStats:
    """Tests for aggregate reporting."""

    def test_open_auctions_and_stats(self, house, clock):
        short = house.create_auction("seller", AuctionConfig(duration=10))
        long = house.create_auction("seller", AuctionConfig(duration=1_000))
        ended = house.create_auction("seller", AuctionConfig(duration=1_000))

        house.place_bid(long.auction_id, "alice", 40)
        house.place_bid(ended.auction_id, "bob", 7)
        house.end_auction(ended.auction_id, "seller")
        clock.advance(20)

        assert house.open_auctions() == [long]

        stats = house.stats()
        assert stats["auctions"] == 3
        assert stats["open_auctions"] == 1
        assert stats["closed_auctions"] == 1
        assert stats["total_bids"] == 2
        assert stats["total_escrowed"] == 47
        assert short.is_open

    def test_stats_while_creating(self, house):
        for _ in range(500):
            house.create_auction("seller")

        errors = []
        done = threading.Event()

        def reader():
            try:
                while not done.is_set():
                    house.stats()
                    house.open_auctions()
            except Exception as exc:
                errors.append(exc)

        thread = threading.Thread(target=reader)
        thread.start()
        try:
            for _ in range(1_500):
                house.create_auction("seller")
        finally:
            done.set()
            thread.join()

        assert errors == []
        assert house.stats()["auctions"] == 2_000

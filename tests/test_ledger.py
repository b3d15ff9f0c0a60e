"""Tests for ledger operations, ids and persistence-on-mutation."""

import json

import pytest
from decimal import Decimal
from structlog.testing import capture_logs

from splitledger.ledger import (
    IdAllocator,
    Ledger,
    LedgerError,
    NotFoundError,
    UnknownParticipantError,
)
from splitledger.models import Entry, Participant
from splitledger.services import (
    InMemoryKeyValueStore,
    KeyValueStore,
    PersistenceError,
    PersistenceGateway,
)


PARTICIPANTS = [Participant(id=i, name=name) for i, name in enumerate(["Anna", "Ben", "Carla", "David"])]


class FailingStore(KeyValueStore):
    """Store whose writes always fail."""

    def get(self, key):
        return None

    def set(self, key, value):
        raise PersistenceError("disk full")


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def gateway(store):
    return PersistenceGateway(store)


@pytest.fixture
def ledger(gateway):
    return Ledger(gateway=gateway, participants=PARTICIPANTS)


def stored(store, key="entries"):
    return json.loads(store.get(key))


def draft(ledger, price, participant_ids):
    ledger.set_price(price)
    ledger.set_participants(participant_ids)


class TestIdAllocator:
    """Tests for IdAllocator."""

    def test_counts_up_from_start(self):
        ids = IdAllocator()
        assert [ids.next(), ids.next(), ids.next()] == [0, 1, 2]

    def test_seeded_above_existing_ids(self):
        entries = [Entry(id=4), Entry(id=9), Entry(id=2)]
        assert IdAllocator.seeded_from(entries).next() == 10

    def test_seeded_from_nothing_starts_at_zero(self):
        assert IdAllocator.seeded_from([]).next() == 0

    def test_peek_does_not_advance(self):
        ids = IdAllocator(5)
        assert ids.peek() == 5
        assert ids.next() == 5
        assert ids.peek() == 6

    def test_negative_start_rejected(self):
        with pytest.raises(ValueError):
            IdAllocator(-1)


class TestBootstrap:
    """Tests for a fresh ledger."""

    def test_fresh_ledger_has_one_blank_draft(self, ledger):
        assert len(ledger) == 1
        assert ledger.current.id == 0
        assert ledger.current.price == Decimal("0.00")
        assert ledger.current.participant_ids == []

    def test_fresh_ledger_is_not_persisted_yet(self, ledger, store):
        assert "entries" not in store

    def test_current_is_the_stored_object(self, ledger):
        """Edits through `current` change the entry inside the list."""
        ledger.current.price = Decimal("1.00")
        assert ledger.entries[0].price == Decimal("1.00")


class TestIsValid:
    """Tests for the commit gate."""

    def test_false_for_zero_price(self, ledger):
        draft(ledger, 0, [0])
        assert ledger.is_valid() is False

    def test_false_for_no_participants(self, ledger):
        draft(ledger, Decimal("1.00"), [])
        assert ledger.is_valid() is False

    def test_true_with_price_and_participants(self, ledger):
        draft(ledger, Decimal("1.00"), [0])
        assert ledger.is_valid() is True

    def test_negative_price_is_valid(self, ledger):
        draft(ledger, Decimal("-1.00"), [0])
        assert ledger.is_valid() is True

    def test_false_for_empty_ledger(self):
        assert Ledger(entries=[]).is_valid() is False


class TestCreate:
    """Tests for create()."""

    def test_create_appends_blank_draft(self, ledger):
        """The committed entry keeps its values; the new one is blank."""
        draft(ledger, Decimal("2.00"), [0, 1])

        new = ledger.create()

        assert [e.id for e in ledger.entries] == [0, 1]
        assert ledger.entries[0].price == Decimal("2.00")
        assert ledger.entries[0].participant_ids == [0, 1]
        assert new is ledger.current
        assert new.id == 1
        assert new.price == Decimal("0.00")
        assert new.participant_ids == []

    def test_create_is_noop_when_invalid(self, ledger, store):
        assert ledger.create() is None
        assert len(ledger) == 1
        assert "entries" not in store

    def test_create_persists(self, ledger, store):
        draft(ledger, Decimal("2.00"), [0, 1])
        ledger.create()
        assert stored(store) == [
            {"id": 0, "price": 2.0, "userIds": [0, 1]},
            {"id": 1, "price": 0.0, "userIds": []},
        ]


class TestDuplicate:
    """Tests for duplicate()."""

    def test_duplicate_keeps_values(self, ledger):
        draft(ledger, Decimal("4.20"), [2, 3])

        copy = ledger.duplicate()

        assert copy is ledger.current
        assert copy.id == 1
        assert copy.price == Decimal("4.20")
        assert copy.participant_ids == [2, 3]

    def test_duplicate_copies_participant_list(self, ledger):
        """Editing the copy leaves the original's participants alone."""
        draft(ledger, Decimal("4.20"), [2, 3])
        ledger.duplicate()
        ledger.toggle_participant(3)

        assert ledger.get(0).participant_ids == [2, 3]
        assert ledger.get(1).participant_ids == [2]

    def test_duplicate_is_noop_when_invalid(self, ledger):
        draft(ledger, Decimal("4.20"), [])
        assert ledger.duplicate() is None
        assert len(ledger) == 1


class TestAddDeposit:
    """Tests for add_deposit()."""

    def test_deposit_example(self, ledger):
        """2.00 for {0,1} becomes 2.00, then 0.25 for {0,1}, then a blank draft."""
        draft(ledger, Decimal("2.00"), [0, 1])

        result = ledger.add_deposit()

        entries = ledger.entries
        assert len(entries) == 3
        assert (entries[0].price, entries[0].participant_ids) == (Decimal("2.00"), [0, 1])
        assert (entries[1].price, entries[1].participant_ids) == (Decimal("0.25"), [0, 1])
        assert (entries[2].price, entries[2].participant_ids) == (Decimal("0.00"), [])
        assert result is ledger.current
        assert ledger.current.id == 2

    def test_deposit_persists_once(self, gateway):
        saves = []

        class CountingGateway(PersistenceGateway):
            def save(self, entries):
                saves.append([e.id for e in entries])
                super().save(entries)

        ledger = Ledger(
            entries=[Entry(id=0, price=Decimal("2.00"), participant_ids=[0, 1])],
            gateway=CountingGateway(InMemoryKeyValueStore()),
        )
        ledger.add_deposit()
        assert saves == [[0, 1, 2]]

    def test_custom_deposit_amount(self, gateway):
        ledger = Ledger(
            entries=[Entry(id=0, price=Decimal("1.00"), participant_ids=[3])],
            gateway=gateway,
            deposit_amount=Decimal("0.08"),
        )
        ledger.add_deposit()
        assert ledger.get(1).price == Decimal("0.08")
        assert ledger.get(1).participant_ids == [3]

    def test_deposit_is_noop_when_invalid(self, ledger):
        draft(ledger, 0, [0, 1])
        assert ledger.add_deposit() is None
        assert len(ledger) == 1


class TestDelete:
    """Tests for delete()."""

    @pytest.fixture
    def abc(self, gateway):
        entries = [
            Entry(id=10, price=1, participant_ids=[0]),
            Entry(id=11, price=2, participant_ids=[1]),
            Entry(id=12, price=3, participant_ids=[2]),
        ]
        return Ledger(entries=entries, gateway=gateway, current_id=11)

    def test_delete_moves_to_next_entry(self, abc):
        """Deleting B from [A, B, C] makes C current."""
        removed = abc.delete()
        assert removed.id == 11
        assert [e.id for e in abc.entries] == [10, 12]
        assert abc.current.id == 12

    def test_delete_last_position_moves_back(self, abc):
        abc.select(12)
        abc.delete()
        assert abc.current.id == 11

    def test_delete_first_position(self, abc):
        abc.select(10)
        abc.delete()
        assert abc.current.id == 11

    def test_delete_only_entry_leaves_empty_ledger(self, ledger, store):
        ledger.delete()
        assert ledger.entries == []
        assert ledger.current is None
        assert ledger.is_empty is True
        assert stored(store) == []

    def test_delete_on_empty_ledger_raises(self):
        with pytest.raises(NotFoundError):
            Ledger(entries=[]).delete()

    def test_delete_persists(self, abc, store):
        abc.delete()
        assert [e["id"] for e in stored(store)] == [10, 12]


class TestSelect:
    """Tests for select()."""

    def test_select_changes_current(self, ledger):
        draft(ledger, Decimal("1.00"), [0])
        ledger.create()
        ledger.select(0)
        assert ledger.current.id == 0

    def test_select_unknown_id_raises(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.select(99)
        assert ledger.current.id == 0

    def test_unknown_current_id_rejected(self):
        with pytest.raises(NotFoundError):
            Ledger(entries=[Entry(id=0)], current_id=5)


class TestIdentity:
    """Tests for id uniqueness across operations."""

    def test_ids_strictly_increase_across_deletes(self, ledger):
        created = [ledger.current.id]

        draft(ledger, Decimal("1.00"), [0])
        created.append(ledger.create().id)
        draft(ledger, Decimal("2.00"), [1])
        created.append(ledger.duplicate().id)
        ledger.delete()
        draft(ledger, Decimal("3.00"), [2])
        created.append(ledger.add_deposit().id)
        ledger.select(created[0])
        ledger.delete()
        draft(ledger, Decimal("4.00"), [3])
        created.append(ledger.create().id)

        assert created == sorted(created)
        assert len(set(created)) == len(created)
        ids = [e.id for e in ledger.entries]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_deleted_ids_are_not_reused(self, ledger):
        draft(ledger, Decimal("1.00"), [0])
        ledger.duplicate()
        ledger.delete()
        draft(ledger, Decimal("1.00"), [0])
        assert ledger.duplicate().id == 2

    def test_bootstrap_after_emptying_uses_fresh_id(self, ledger):
        ledger.delete()
        entry = ledger.bootstrap()
        assert entry.id == 1
        assert ledger.current is entry

    def test_bootstrap_refused_when_not_empty(self, ledger):
        with pytest.raises(LedgerError):
            ledger.bootstrap()


class TestDraftEditing:
    """Tests for editing the current entry."""

    def test_set_price_input_uses_tape_parsing(self, ledger):
        ledger.set_price_input("0,053")
        assert ledger.current.price == Decimal("0.53")

    def test_toggle_participant(self, ledger):
        ledger.toggle_participant(2)
        ledger.toggle_participant(0)
        assert ledger.current.participant_ids == [2, 0]
        ledger.toggle_participant(2)
        assert ledger.current.participant_ids == [0]

    def test_unknown_participant_rejected(self, ledger):
        with pytest.raises(UnknownParticipantError):
            ledger.toggle_participant(4)
        with pytest.raises(UnknownParticipantError):
            ledger.set_participants([0, 9])
        assert ledger.current.participant_ids == []

    def test_edits_persist(self, ledger, store):
        ledger.set_price(Decimal("7.50"))
        ledger.toggle_participant(1)
        assert stored(store) == [{"id": 0, "price": 7.5, "userIds": [1]}]

    def test_editing_empty_ledger_raises(self):
        with pytest.raises(NotFoundError):
            Ledger(entries=[]).set_price(1)


class TestLogging:
    """Tests for structured log events."""

    def test_create_logs_event(self):
        with capture_logs() as logs:
            ledger = Ledger(entries=[Entry(id=0, price=Decimal("2.00"), participant_ids=[0, 1])])
            ledger.create()
        created = [log for log in logs if log["event"] == "entry_created"]
        assert created[0]["entry_id"] == 1
        assert created[0]["committed_id"] == 0

    def test_failed_save_logs_error(self):
        with capture_logs() as logs:
            ledger = Ledger(gateway=PersistenceGateway(FailingStore()))
            with pytest.raises(PersistenceError):
                ledger.set_price(1)
        assert any(
            log["event"] == "snapshot_save_failed" and log["log_level"] == "error"
            for log in logs
        )


class TestPersistenceFailure:
    """Tests for save failures."""

    def test_mutation_survives_failed_save(self):
        ledger = Ledger(
            entries=[Entry(id=0, price=Decimal("2.00"), participant_ids=[0])],
            gateway=PersistenceGateway(FailingStore()),
        )

        with pytest.raises(PersistenceError):
            ledger.create()

        assert len(ledger) == 2
        assert ledger.current.id == 1

    def test_ledger_without_gateway_does_not_persist(self):
        ledger = Ledger()
        ledger.set_price(1)
        ledger.set_participants([0])
        assert ledger.create().id == 1


class TestLoad:
    """Tests for Ledger.load()."""

    def test_load_restores_entries_and_seeds_ids(self, store):
        store.set(
            "entries",
            b'[{"id": 3, "price": 2.5, "userIds": [0]}, {"id": 7, "price": 0, "userIds": []}]',
        )
        ledger = Ledger.load(PersistenceGateway(store), participants=PARTICIPANTS)

        assert [e.id for e in ledger.entries] == [3, 7]
        assert ledger.current.id == 7
        assert ledger.next_id == 8

    def test_load_absent_bootstraps(self, gateway):
        ledger = Ledger.load(gateway)
        assert [e.id for e in ledger.entries] == [0]

    @pytest.mark.parametrize(
        "payload",
        [b"not json", b"[]", b'{"id": 1}', b'[{"price": 1}]', b'[{"id": 1}, {"id": 1}]'],
    )
    def test_load_malformed_bootstraps(self, store, payload):
        store.set("entries", payload)
        ledger = Ledger.load(PersistenceGateway(store))
        assert len(ledger) == 1
        assert ledger.current.id == 0
        assert ledger.current.price == Decimal("0.00")

    def test_load_propagates_store_failure(self):
        class UnreadableStore(InMemoryKeyValueStore):
            def get(self, key):
                raise PersistenceError("store offline")

        with pytest.raises(PersistenceError):
            Ledger.load(PersistenceGateway(UnreadableStore()))

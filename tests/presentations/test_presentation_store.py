"""Tests for the presentation store: CRUD, transitions and queries."""

from datetime import date, datetime

import pytest

from pulpit.presentations.errors import PersistenceError
from pulpit.presentations.models import PresentationRecord, PresentationStatus, TodoItem
from pulpit.presentations.repository import InMemoryPresentationRepository
from pulpit.presentations.store import PresentationStore
from pulpit.scheduling.recurrence import Monthly, Weekly
from pulpit.scheduling.schedule_entry import ServiceLabel


class FailingRepository(InMemoryPresentationRepository):
    """Repository whose saves fail once ``fail`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def save(self, document_id, records):
        if self.fail:
            raise PersistenceError(document_id, "disk full")
        super().save(document_id, records)


class TestCrud:
    def test_add_writes_through(self, store, repository):
        record = store.record_presentation(datetime(2023, 12, 31, 11, 0), location="Main hall")
        assert repository.save_count == 1
        assert [p["id"] for p in repository.payloads("doc-1")] == [record.id]

    def test_records_reload_in_a_new_store(self, store, repository):
        record = store.schedule_presentation(datetime(2024, 3, 1, 10, 0), service_label=ServiceLabel.SUNDAY_MORNING)
        reopened = PresentationStore("doc-1", repository)
        assert reopened.get(record.id) == record

    def test_add_rejects_other_documents(self, store):
        with pytest.raises(ValueError, match="belongs to document"):
            store.add(PresentationRecord.presented("doc-2", datetime(2024, 1, 1)))

    def test_add_rejects_a_duplicate_id(self, store, repository):
        record = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        saves = repository.save_count

        with pytest.raises(ValueError, match="already exists"):
            store.add(record)

        assert [r.id for r in store.records] == [record.id]
        assert repository.save_count == saves

    def test_update_rejects_other_documents(self, store, repository):
        record = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        moved = record.model_copy(update={"document_id": "doc-2"})

        with pytest.raises(ValueError, match="belongs to document"):
            store.update(moved)

        reopened = PresentationStore("doc-1", repository)
        assert [r.document_id for r in reopened.records] == ["doc-1"]

    def test_update_replaces_by_id(self, store):
        record = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        record.location = "Fellowship hall"
        assert store.update(record) is True
        assert store.get(record.id).location == "Fellowship hall"

    def test_update_unknown_id_is_a_no_op(self, store, repository):
        saves = repository.save_count
        assert store.update(PresentationRecord.presented("doc-1", datetime(2024, 1, 1))) is False
        assert repository.save_count == saves
        assert store.records == []

    def test_remove(self, store):
        record = store.record_presentation(datetime(2024, 1, 1))
        assert store.remove(record.id) is True
        assert store.remove(record.id) is False
        assert store.records == []

    def test_returned_records_are_copies(self, store):
        record = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        fetched = store.get(record.id)
        fetched.status = PresentationStatus.CANCELED
        assert store.get(record.id).status is PresentationStatus.SCHEDULED


class TestCancel:
    def test_cancel_moves_record_from_future_to_past(self, store):
        record = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        assert store.cancel_presentation(record.id) is True

        assert record.id not in [r.id for r in store.future_presentations]
        assert [r.id for r in store.past_presentations] == [record.id]

    def test_cancel_only_changes_status(self, store):
        record = store.schedule_presentation(
            datetime(2024, 3, 1, 10, 0),
            location="Chapel",
            recurrence=Monthly(day_of_month=1),
            notes="Communion",
        )
        store.cancel_presentation(record.id)
        canceled = store.get(record.id)
        assert canceled.status is PresentationStatus.CANCELED
        assert canceled.model_dump(exclude={"status"}) == record.model_dump(exclude={"status"})

    def test_cancel_twice_is_idempotent(self, store):
        record = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        store.cancel_presentation(record.id)
        once = store.get(record.id)

        assert store.cancel_presentation(record.id) is False
        assert store.get(record.id) == once

    def test_cancel_unknown_id(self, store):
        assert store.cancel_presentation("missing") is False

    def test_presented_records_cannot_be_canceled(self, store):
        record = store.record_presentation(datetime(2024, 1, 1))
        assert store.cancel_presentation(record.id) is False
        assert store.get(record.id).status is PresentationStatus.PRESENTED


class TestReschedule:
    """Tests for the reschedule chain."""

    def test_linkage_between_old_and_new_record(self, store):
        original = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        replacement = store.reschedule_presentation(original.id, datetime(2024, 3, 8, 10, 0))

        assert replacement is not None
        assert len(store.records) == 2
        old = store.get(original.id)
        new = store.get(replacement.id)
        assert old.status is PresentationStatus.RESCHEDULED
        assert old.rescheduled_to == new.id
        assert new.rescheduled_from == old.id
        assert new.status is PresentationStatus.SCHEDULED
        assert new.datetime == datetime(2024, 3, 8, 10, 0)
        assert old.datetime == datetime(2024, 3, 1, 10, 0)

    def test_old_record_drops_out_of_both_lists(self, store):
        original = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        replacement = store.reschedule_presentation(original.id, datetime(2024, 3, 8, 10, 0))

        assert store.past_presentations == []
        assert [r.id for r in store.future_presentations] == [replacement.id]

    def test_details_are_carried_over(self, store):
        rule = Weekly(days_of_week=frozenset({6}))
        todos = [TodoItem(text="Confirm worship team")]
        original = store.schedule_presentation(
            datetime(2024, 3, 1, 19, 0),
            location="Youth room",
            service_label=ServiceLabel.SPECIAL,
            recurrence=rule,
            notes="Friday night",
            todo_items=todos,
        )
        replacement = store.reschedule_presentation(original.id, datetime(2024, 3, 2, 19, 0))

        assert replacement.document_id == "doc-1"
        assert replacement.location == "Youth room"
        assert replacement.service_label is ServiceLabel.SPECIAL
        assert replacement.recurrence == rule
        assert replacement.notes == "Friday night"
        assert replacement.todo_items == todos

    def test_unknown_id_changes_nothing(self, store, repository):
        store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        saves = repository.save_count
        assert store.reschedule_presentation("missing", datetime(2024, 3, 8)) is None
        assert repository.save_count == saves
        assert len(store.records) == 1

    def test_rescheduled_record_cannot_be_rescheduled_again(self, store):
        original = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        store.reschedule_presentation(original.id, datetime(2024, 3, 8, 10, 0))
        assert store.reschedule_presentation(original.id, datetime(2024, 3, 15, 10, 0)) is None
        assert len(store.records) == 2

    def test_chain_of_two_reschedules(self, store):
        first = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        second = store.reschedule_presentation(first.id, datetime(2024, 3, 8, 10, 0))
        third = store.reschedule_presentation(second.id, datetime(2024, 3, 15, 10, 0))

        middle = store.get(second.id)
        assert middle.status is PresentationStatus.RESCHEDULED
        assert middle.rescheduled_from == first.id
        assert middle.rescheduled_to == third.id
        assert [r.id for r in store.future_presentations] == [third.id]


class TestMarkPresented:
    def test_scheduled_record_becomes_presented(self, store):
        record = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        assert store.mark_presented(record.id) is True
        assert [r.id for r in store.past_presentations] == [record.id]

    def test_canceled_record_stays_canceled(self, store):
        record = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))
        store.cancel_presentation(record.id)
        assert store.mark_presented(record.id) is False
        assert store.get(record.id).status is PresentationStatus.CANCELED


class TestQueries:
    def test_presentations_for_covers_the_whole_day(self, store):
        early = store.schedule_presentation(datetime(2024, 3, 3, 0, 0))
        late = store.schedule_presentation(datetime(2024, 3, 3, 23, 59, 59))
        store.schedule_presentation(datetime(2024, 3, 2, 23, 59, 59))
        store.schedule_presentation(datetime(2024, 3, 4, 0, 0))

        assert [r.id for r in store.presentations_for(date(2024, 3, 3))] == [early.id, late.id]
        assert [r.id for r in store.presentations_for(datetime(2024, 3, 3, 12, 0))] == [early.id, late.id]

    def test_results_are_sorted_by_datetime(self, store):
        later = store.record_presentation(datetime(2024, 2, 1))
        earlier = store.record_presentation(datetime(2024, 1, 1))
        assert [r.id for r in store.past_presentations] == [earlier.id, later.id]
        assert [r.id for r in store.records] == [earlier.id, later.id]

    def test_upcoming_excludes_scheduled_records_in_the_past(self, store):
        stale = store.schedule_presentation(datetime(2024, 1, 7, 10, 0))
        ahead = store.schedule_presentation(datetime(2024, 1, 14, 10, 0))
        now = datetime(2024, 1, 10)

        assert [r.id for r in store.upcoming_presentations(now)] == [ahead.id]
        assert stale.id in [r.id for r in store.future_presentations]

    def test_generate_occurrences_for_a_record(self, store):
        record = store.schedule_presentation(datetime(2024, 1, 31), recurrence=Monthly(day_of_month=31))
        assert store.generate_occurrences(record.id, date(2024, 4, 30)) == [
            datetime(2024, 1, 31),
            datetime(2024, 2, 29),
            datetime(2024, 3, 31),
            datetime(2024, 4, 30),
        ]

    def test_generate_occurrences_unknown_id(self, store):
        assert store.generate_occurrences("missing", date(2024, 4, 30)) == []


class TestPersistenceFailures:
    def test_failed_save_surfaces_and_keeps_memory_state(self):
        repository = FailingRepository()
        store = PresentationStore("doc-1", repository)
        record = store.schedule_presentation(datetime(2024, 3, 1, 10, 0))

        repository.fail = True
        with pytest.raises(PersistenceError) as exc_info:
            store.cancel_presentation(record.id)

        assert exc_info.value.document_id == "doc-1"
        assert store.get(record.id).status is PresentationStatus.CANCELED
        assert repository.payloads("doc-1")[0]["status"] == "Scheduled"

    def test_stores_are_independent_per_document(self, repository):
        first = PresentationStore("doc-1", repository)
        second = PresentationStore("doc-2", repository)
        first.record_presentation(datetime(2024, 1, 1))

        assert second.records == []
        assert PresentationStore("doc-2", repository).records == []

import logging
from datetime import date, datetime

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from salonbook.core.errors import StoreUnavailableError
from salonbook.db import appointments as appointments_db
from salonbook.db import availability as availability_db
from salonbook.db import salon_images as salon_images_db
from salonbook.schemas.appointment import AppointmentStatus

STYLIST_ID = "stylist-1"
MONDAY = date(2030, 1, 7)


def _matches(document, query):
    for field, condition in query.items():
        value = document.get(field)
        if isinstance(condition, dict):
            for op, operand in condition.items():
                if op == "$in" and value not in operand:
                    return False
                if op == "$ne" and value == operand:
                    return False
                if op == "$lt" and not value < operand:
                    return False
                if op == "$gt" and not value > operand:
                    return False
        elif value != condition:
            return False
    return True


class FakeResult:
    def __init__(self, matched=0, modified=0, deleted=0, inserted_id=None):
        self.matched_count = matched
        self.modified_count = modified
        self.deleted_count = deleted
        self.inserted_id = inserted_id


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents

    def sort(self, key, direction=None):
        keys = key if isinstance(key, list) else [(key, direction)]
        for field, order in reversed(keys):
            self.documents.sort(key=lambda d: d.get(field), reverse=order < 0)
        return self

    def skip(self, count):
        self.documents = self.documents[count:]
        return self

    def limit(self, count):
        self.documents = self.documents[:count]
        return self

    async def to_list(self, length=None):
        return [dict(d) for d in self.documents[:length]]


class FakeCollection:
    """Just enough of an AsyncIOMotorCollection for the store functions."""

    def __init__(self, documents=()):
        self.documents = [dict(d) for d in documents]
        self.failures = []

    def _raise_queued(self):
        if self.failures:
            raise self.failures.pop(0)

    def find(self, query, projection=None):
        self._raise_queued()
        return FakeCursor([d for d in self.documents if _matches(d, query)])

    async def find_one(self, query):
        found = [d for d in self.documents if _matches(d, query)]
        return dict(found[0]) if found else None

    async def insert_one(self, document):
        self._raise_queued()
        document = dict(document, _id=ObjectId())
        self.documents.append(document)
        return FakeResult(inserted_id=document["_id"])

    async def update_one(self, query, update, upsert=False):
        self._raise_queued()
        for document in self.documents:
            if _matches(document, query):
                document.update(update.get("$set", {}))
                return FakeResult(matched=1, modified=1)
        if upsert:
            document = {k: v for k, v in query.items() if not isinstance(v, dict)}
            document.update(update.get("$set", {}))
            document.update(update.get("$setOnInsert", {}))
            document["_id"] = ObjectId()
            self.documents.append(document)
        return FakeResult()

    async def update_many(self, query, update):
        matched = [d for d in self.documents if _matches(d, query)]
        for document in matched:
            document.update(update["$set"])
        return FakeResult(matched=len(matched), modified=len(matched))


@pytest.fixture
def collections(monkeypatch):
    store = {}

    def fake_get_collection(name):
        return store.setdefault(name, FakeCollection())

    for module in (availability_db, appointments_db, salon_images_db):
        monkeypatch.setattr(module, "get_collection", fake_get_collection)
    return store


def appointment(status, start, end, stylist_id=STYLIST_ID, on=MONDAY):
    return {
        "_id": ObjectId(),
        "stylistId": stylist_id,
        "appointmentDate": on.isoformat(),
        "startTime": start,
        "endTime": end,
        "status": status,
        "blocksSlot": status in ("pending", "confirmed"),
    }


class TestAvailabilityRules:
    @pytest.mark.asyncio
    async def test_most_recently_updated_duplicate_wins(self, collections, caplog):
        collections["availability"] = FakeCollection([
            {"_id": ObjectId(), "stylistId": STYLIST_ID, "dayOfWeek": 1, "startTime": "09:00",
             "endTime": "17:00", "isAvailable": True, "updatedAt": datetime(2025, 1, 1)},
            {"_id": ObjectId(), "stylistId": STYLIST_ID, "dayOfWeek": 1, "startTime": "10:00",
             "endTime": "14:00", "isAvailable": True, "updatedAt": datetime(2025, 6, 1)},
        ])

        with caplog.at_level(logging.WARNING):
            rule = await availability_db.get_availability_rule(STYLIST_ID, 1)

        assert (rule.startTime, rule.endTime) == ("10:00", "14:00")
        assert "Duplicate availability rules" in caplog.text

    @pytest.mark.asyncio
    async def test_inactive_rule_is_not_returned(self, collections):
        collections["availability"] = FakeCollection([
            {"_id": ObjectId(), "stylistId": STYLIST_ID, "dayOfWeek": 1, "startTime": "09:00",
             "endTime": "17:00", "isAvailable": False, "updatedAt": datetime(2025, 1, 1)},
        ])
        assert await availability_db.get_availability_rule(STYLIST_ID, 1) is None

    @pytest.mark.asyncio
    async def test_unreadable_rule_is_skipped(self, collections, caplog):
        collections["availability"] = FakeCollection([
            {"_id": ObjectId(), "stylistId": STYLIST_ID, "dayOfWeek": 1, "startTime": "nine",
             "endTime": "17:00", "isAvailable": True, "updatedAt": datetime(2025, 1, 1)},
        ])
        with caplog.at_level(logging.WARNING):
            assert await availability_db.get_availability_rule(STYLIST_ID, 1) is None
        assert "Unreadable availability rule" in caplog.text

    @pytest.mark.asyncio
    async def test_upsert_retries_after_concurrent_insert(self, collections):
        availability = collections["availability"] = FakeCollection([
            {"_id": ObjectId(), "stylistId": STYLIST_ID, "dayOfWeek": 2, "startTime": "09:00",
             "endTime": "12:00", "isAvailable": True},
        ])
        availability.failures.append(DuplicateKeyError("E11000 duplicate key error"))

        rule = await availability_db.upsert_availability_rule(
            STYLIST_ID, 2, {"startTime": "10:00", "endTime": "18:00", "isAvailable": True}
        )

        assert (rule["startTime"], rule["endTime"], rule["dayName"]) == ("10:00", "18:00", "tuesday")
        assert len(availability.documents) == 1

    @pytest.mark.asyncio
    async def test_upsert_creates_missing_rule(self, collections):
        rule = await availability_db.upsert_availability_rule(
            STYLIST_ID, 0, {"startTime": "11:00", "endTime": "24:00", "isAvailable": True}
        )
        assert rule["dayName"] == "sunday"
        assert rule["id"]
        assert "createdAt" in rule


class TestBookedIntervals:
    @pytest.mark.asyncio
    async def test_only_pending_and_confirmed_block(self, collections):
        collections["appointments"] = FakeCollection([
            appointment("confirmed", "11:00", "11:30"),
            appointment("pending", "09:00", "09:45"),
            appointment("cancelled", "10:00", "10:30"),
            appointment("completed", "12:00", "12:30"),
            appointment("confirmed", "13:00", "13:30", stylist_id="stylist-2"),
            appointment("confirmed", "14:00", "14:30", on=date(2030, 1, 8)),
        ])

        intervals = await appointments_db.get_booked_intervals(STYLIST_ID, MONDAY)

        assert [(i.startTime, i.endTime) for i in intervals] == [("09:00", "09:45"), ("11:00", "11:30")]

    @pytest.mark.asyncio
    async def test_status_filter_can_be_narrowed(self, collections):
        collections["appointments"] = FakeCollection([
            appointment("confirmed", "11:00", "11:30"),
            appointment("pending", "09:00", "09:45"),
        ])
        intervals = await appointments_db.get_booked_intervals(
            STYLIST_ID, MONDAY, [AppointmentStatus.CONFIRMED]
        )
        assert [i.startTime for i in intervals] == ["11:00"]


class TestDriverErrors:
    @pytest.mark.asyncio
    async def test_driver_failure_becomes_store_unavailable(self, collections):
        appointments = collections["appointments"] = FakeCollection()
        appointments.failures.append(ServerSelectionTimeoutError("no servers available"))

        with pytest.raises(StoreUnavailableError) as exc_info:
            await appointments_db.get_booked_intervals(STYLIST_ID, MONDAY)

        assert exc_info.value.operation == "get_booked_intervals"
        assert isinstance(exc_info.value.cause, ServerSelectionTimeoutError)

    @pytest.mark.asyncio
    async def test_duplicate_key_passes_through(self, collections):
        appointments = collections["appointments"] = FakeCollection()
        appointments.failures.append(DuplicateKeyError("E11000 duplicate key error"))

        with pytest.raises(DuplicateKeyError):
            await appointments_db.insert_appointment(
                {"stylistId": STYLIST_ID, "startTime": "10:00", "endTime": "10:30", "status": "pending"}
            )

    @pytest.mark.asyncio
    async def test_unconnected_store_is_unavailable(self):
        with pytest.raises(StoreUnavailableError):
            await availability_db.get_availability_rule(STYLIST_ID, 1)


class TestAppointmentWrites:
    @pytest.mark.asyncio
    async def test_new_pending_appointment_blocks_its_slot(self, collections):
        created = await appointments_db.insert_appointment(
            {"stylistId": STYLIST_ID, "startTime": "10:00", "endTime": "10:30", "status": "pending"}
        )
        assert created["blocksSlot"] is True
        assert created["id"] == str(created["_id"])

    @pytest.mark.asyncio
    async def test_status_change_is_compare_and_set(self, collections):
        booked = appointment("pending", "10:00", "10:30")
        collections["appointments"] = FakeCollection([booked])
        appointment_id = str(booked["_id"])

        cancelled = await appointments_db.update_appointment_status(
            appointment_id, AppointmentStatus.PENDING, AppointmentStatus.CANCELLED
        )
        assert cancelled["status"] == "cancelled"
        assert cancelled["blocksSlot"] is False

        stale = await appointments_db.update_appointment_status(
            appointment_id, AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED
        )
        assert stale is None

    @pytest.mark.asyncio
    async def test_cancel_stylist_appointments_releases_active_ones(self, collections):
        collections["appointments"] = FakeCollection([
            appointment("pending", "09:00", "09:30"),
            appointment("confirmed", "10:00", "10:30"),
            appointment("completed", "11:00", "11:30"),
            appointment("pending", "09:00", "09:30", stylist_id="stylist-2"),
        ])

        cancelled = await appointments_db.cancel_stylist_appointments(STYLIST_ID, "Stylist left")

        assert cancelled == 2
        documents = collections["appointments"].documents
        assert [d["status"] for d in documents] == ["cancelled", "cancelled", "completed", "pending"]
        assert [d["blocksSlot"] for d in documents] == [False, False, False, True]
        assert documents[0]["cancellationReason"] == "Stylist left"


class TestGallery:
    @pytest.mark.asyncio
    async def test_single_primary_image(self, collections):
        first = await salon_images_db.add_salon_image("salon-1", "https://cdn.example.com/a.jpg", is_primary=True)
        second = await salon_images_db.add_salon_image("salon-1", "https://cdn.example.com/b.jpg", is_primary=True)
        await salon_images_db.add_salon_image("salon-2", "https://cdn.example.com/c.jpg", is_primary=True)

        gallery = await salon_images_db.get_salon_images("salon-1")
        assert [(i["id"], i["isPrimary"]) for i in gallery] == [(second["id"], True), (first["id"], False)]

        await salon_images_db.set_primary_image("salon-1", first["id"])
        gallery = await salon_images_db.get_salon_images("salon-1")
        assert [(i["id"], i["isPrimary"]) for i in gallery] == [(first["id"], True), (second["id"], False)]

        other = await salon_images_db.get_salon_images("salon-2")
        assert other[0]["isPrimary"] is True

    @pytest.mark.asyncio
    async def test_primary_must_belong_to_salon(self, collections):
        image = await salon_images_db.add_salon_image("salon-2", "https://cdn.example.com/c.jpg")
        assert await salon_images_db.set_primary_image("salon-1", image["id"]) is None
        assert await salon_images_db.set_primary_image("salon-1", "not-an-id") is None

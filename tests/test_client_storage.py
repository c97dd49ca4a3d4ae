"""Tests for versioned client snapshots and store rehydration."""

import json

import pytest

from teampulse.client import (
    AuthStore,
    ClientContext,
    KudosStore,
    NotificationStore,
    SnapshotStorage,
    TeamPulseClient,
)


@pytest.fixture
def storage(tmp_path) -> SnapshotStorage:
    return SnapshotStorage(tmp_path / "snapshots.json")


class TestSnapshotStorage:
    """Versioned records."""

    def test_save_and_load(self, storage):
        storage.save("teampulse-kudos", {"kudos": [1, 2]}, version=2)

        assert storage.load("teampulse-kudos", version=2) == {"kudos": [1, 2]}

    def test_version_mismatch_discards_record(self, storage):
        storage.save("teampulse-kudos", {"kudos": [1]}, version=1)

        assert storage.load("teampulse-kudos", version=2) is None
        assert storage.get_item("teampulse-kudos") is None

    def test_unreadable_record_is_discarded(self, storage):
        storage.set_item("teampulse-auth", "{not json")

        assert storage.load("teampulse-auth", version=1) is None
        assert storage.get_item("teampulse-auth") is None

    def test_record_without_version_is_discarded(self, storage):
        storage.set_item("teampulse-auth", json.dumps({"state": {}}))

        assert storage.load("teampulse-auth", version=1) is None

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "snapshots.json"
        SnapshotStorage(path).save("teampulse-budget", {"budget": None}, version=1)

        assert SnapshotStorage(path).load("teampulse-budget", version=1) == {"budget": None}

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "snapshots.json"
        path.write_text("garbage", encoding="utf-8")

        assert SnapshotStorage(path).get_item("anything") is None

    def test_memory_only(self):
        storage = SnapshotStorage()
        storage.save("k", [1], version=0)
        assert storage.load("k", version=0) == [1]


@pytest.mark.asyncio
class TestStores:
    """Stores rehydrate from snapshots and honour demo mode."""

    async def test_auth_store_rehydrates_token(self, storage):
        storage.save(
            "teampulse-auth",
            {"token": "abc", "user": {"id": "u1", "name": "Ada"}},
            version=AuthStore.version,
        )
        async with TeamPulseClient("http://test/api") as client:
            store = AuthStore(ClientContext(client=client, storage=storage))

            assert store.is_authenticated
            assert client.token == "abc"
            assert store.session_context().user_id == "u1"

    async def test_stale_snapshot_starts_fresh(self, storage):
        storage.save("teampulse-kudos", {"kudos": [{"id": "old"}]}, version=KudosStore.version + 1)
        async with TeamPulseClient("http://test/api") as client:
            store = KudosStore(ClientContext(client=client, storage=storage))

            assert store.kudos == []

    async def test_demo_kudos_are_local(self, storage):
        async with TeamPulseClient("http://127.0.0.1:9/api") as client:
            context = ClientContext(client=client, storage=storage, user_id="me", demo=True)
            store = KudosStore(context)
            kudos = await store.send("you", "Great work!", monetary_amount=5)

            assert kudos["status"] == "APPROVED"
            assert store.stats() == {"sent": 1, "received": 0}
            assert KudosStore(context).kudos[0]["id"] == kudos["id"]

    async def test_demo_notifications_mark_read_locally(self, storage):
        storage.save(
            "teampulse-notifications",
            {
                "notifications": [{"id": "n1", "isRead": False}, {"id": "n2", "isRead": False}],
                "unreadCount": 2,
            },
            version=NotificationStore.version,
        )
        async with TeamPulseClient("http://127.0.0.1:9/api") as client:
            store = NotificationStore(ClientContext(client=client, storage=storage, demo=True))
            await store.mark_read("n1")
            assert store.unread_count == 1

            await store.mark_all_read()
            assert store.unread_count == 0


def test_context_is_read_only(storage):
    context = ClientContext(client=None, storage=storage)
    with pytest.raises(AttributeError):
        context.user_id = "someone"

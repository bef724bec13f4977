"""
Unit tests for the local filesystem message store.
"""

import json
import pytest
from datetime import datetime, timedelta, timezone

from imagechat.core.errors import DuplicateMessageError, MessageNotFoundError, PersistenceError
from imagechat.models.message import GeneratedImage, Message, MessageType, MessageUpdate
from imagechat.storage import LocalMessageStore

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path):
    return LocalMessageStore(str(tmp_path))


def make_message(message_id, session_id="default", offset=0, **fields):
    return Message(
        id=message_id,
        type=fields.pop("type", MessageType.USER),
        content=fields.pop("content", f"content of {message_id}"),
        timestamp=T0 + timedelta(seconds=offset),
        session_id=session_id,
        **fields,
    )


class TestListMessages:

    @pytest.mark.asyncio
    async def test_sorted_by_timestamp(self, store):
        await store.save_message(make_message("m3", offset=30))
        await store.save_message(make_message("m1", offset=10))
        await store.save_message(make_message("m2", offset=20))

        messages = await store.list_messages("default")

        assert [m.id for m in messages] == ["m1", "m2", "m3"]

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, store):
        await store.save_message(make_message("a1", session_id="a"))
        await store.save_message(make_message("b1", session_id="b"))

        assert [m.id for m in await store.list_messages("a")] == ["a1"]
        assert [m.session_id for m in await store.list_messages("b")] == ["b"]
        assert await store.list_messages("unknown") == []

    @pytest.mark.asyncio
    async def test_document_shape(self, store, tmp_path):
        await store.save_message(make_message("m1", type=MessageType.ASSISTANT, is_generating=True))

        records = json.loads((tmp_path / "messages" / "default.json").read_text(encoding="utf-8"))

        assert records[0]["messageId"] == "m1"
        assert "id" not in records[0]
        assert records[0]["isGenerating"] is True
        assert records[0]["sessionId"] == "default"
        assert "images" not in records[0]

    @pytest.mark.asyncio
    async def test_unsafe_session_id_stays_in_store(self, store, tmp_path):
        await store.save_message(make_message("m1", session_id="../outside"))

        assert not (tmp_path / "outside.json").exists()
        assert [m.id for m in await store.list_messages("../outside")] == ["m1"]

    @pytest.mark.asyncio
    async def test_corrupt_document(self, store, tmp_path):
        (tmp_path / "messages" / "default.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError):
            await store.list_messages("default")

    @pytest.mark.asyncio
    async def test_record_without_message_id(self, store, tmp_path):
        document = tmp_path / "messages" / "default.json"
        document.write_text(json.dumps([{"id": "x", "type": "user", "content": "hi"}]), encoding="utf-8")

        with pytest.raises(PersistenceError):
            await store.list_messages("default")
        with pytest.raises(PersistenceError):
            await store.save_message(make_message("m1", session_id="other"))

    @pytest.mark.asyncio
    async def test_invalid_record(self, store, tmp_path):
        document = tmp_path / "messages" / "default.json"
        document.write_text(json.dumps([{"messageId": "x", "type": "system", "content": "hi"}]), encoding="utf-8")

        with pytest.raises(PersistenceError, match="Malformed message record"):
            await store.list_messages("default")

    @pytest.mark.asyncio
    async def test_session_id_too_long_for_a_file_name(self, store):
        long_id = "s" * 300

        with pytest.raises(PersistenceError):
            await store.save_message(make_message("m1", session_id=long_id))
        with pytest.raises(PersistenceError):
            await store.list_messages(long_id)
        with pytest.raises(PersistenceError):
            await store.clear_messages(long_id)


class TestSaveMessage:

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self, store):
        await store.save_message(make_message("m1", content="original"))

        with pytest.raises(DuplicateMessageError, match="Message with this ID already exists"):
            await store.save_message(make_message("m1", content="replacement"))

        messages = await store.list_messages("default")
        assert [m.content for m in messages] == ["original"]

    @pytest.mark.asyncio
    async def test_ids_unique_across_sessions(self, store):
        await store.save_message(make_message("m1", session_id="a"))

        with pytest.raises(DuplicateMessageError):
            await store.save_message(make_message("m1", session_id="b"))

    @pytest.mark.asyncio
    async def test_index_rebuilt_from_disk(self, store, tmp_path):
        await store.save_message(make_message("m1", session_id="a"))

        reopened = LocalMessageStore(str(tmp_path))

        with pytest.raises(DuplicateMessageError):
            await reopened.save_message(make_message("m1", session_id="b"))
        updated = await reopened.update_message("m1", MessageUpdate(content="edited"))
        assert updated.session_id == "a"


class TestUpdateMessage:

    @pytest.mark.asyncio
    async def test_partial_update(self, store):
        await store.save_message(
            make_message("m1", type=MessageType.ASSISTANT, content="Generating", is_generating=True)
        )
        image = GeneratedImage(id="img-1", url="https://picsum.photos/512/512?random=1", prompt="fox")

        updated = await store.update_message(
            "m1", MessageUpdate(content="Done", images=[image], is_generating=False)
        )

        assert updated.content == "Done"
        assert updated.is_generating is False
        assert updated.timestamp == T0
        stored = (await store.list_messages("default"))[0]
        assert stored.images == [image]
        assert stored.error is None
        assert stored.type == MessageType.ASSISTANT

    @pytest.mark.asyncio
    async def test_unset_fields_are_untouched(self, store):
        await store.save_message(make_message("m1", content="keep me", is_generating=True))

        await store.update_message("m1", MessageUpdate(error="boom"))

        stored = (await store.list_messages("default"))[0]
        assert stored.content == "keep me"
        assert stored.is_generating is True
        assert stored.error == "boom"

    @pytest.mark.asyncio
    async def test_unknown_id(self, store):
        with pytest.raises(MessageNotFoundError, match="Message not found"):
            await store.update_message("missing", MessageUpdate(content="x"))


class TestClearMessages:

    @pytest.mark.asyncio
    async def test_clear_returns_count_and_is_idempotent(self, store):
        await store.save_message(make_message("m1"))
        await store.save_message(make_message("m2", offset=1))
        await store.save_message(make_message("other", session_id="keep"))

        assert await store.clear_messages("default") == 2
        assert await store.clear_messages("default") == 0
        assert await store.list_messages("default") == []
        assert [m.id for m in await store.list_messages("keep")] == ["other"]

    @pytest.mark.asyncio
    async def test_cleared_ids_can_be_reused(self, store):
        await store.save_message(make_message("m1"))
        await store.clear_messages("default")

        await store.save_message(make_message("m1"))

        assert [m.id for m in await store.list_messages("default")] == ["m1"]

    @pytest.mark.asyncio
    async def test_health(self, store):
        assert await store.health() is True

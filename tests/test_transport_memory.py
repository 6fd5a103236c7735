import pytest

from eigenda_store.errors import TransportError
from eigenda_store.transport import BlobStatus, DisperserTransport, MemoryDisperserTransport, StatusReply


def test_satisfies_transport_protocol() -> None:
    assert isinstance(MemoryDisperserTransport(), DisperserTransport)


@pytest.mark.asyncio
async def test_confirms_after_configured_polls() -> None:
    t = MemoryDisperserTransport(confirm_after_polls=2, start_index=5, batch_tag=b"\x01\x02")
    reply = await t.disperse(b"\x00abc")
    assert reply.status == BlobStatus.PROCESSING

    first = await t.poll_status(reply.request_id)
    assert first == StatusReply(status=BlobStatus.PROCESSING)

    second = await t.poll_status(reply.request_id)
    assert second == StatusReply(status=BlobStatus.CONFIRMED, blob_index=5, batch_tag=b"\x01\x02")

    # Placement is stable across further polls.
    assert await t.poll_status(reply.request_id) == second
    assert t.polls_for(reply.request_id) == 3
    assert await t.retrieve(5, b"\x01\x02") == b"\x00abc"


@pytest.mark.asyncio
async def test_indices_are_sequential_and_request_ids_unique() -> None:
    t = MemoryDisperserTransport(confirm_after_polls=0, start_index=10)
    a = await t.disperse(b"a")
    b = await t.disperse(b"b")
    assert a.request_id != b.request_id

    sa = await t.poll_status(a.request_id)
    sb = await t.poll_status(b.request_id)
    assert (sa.blob_index, sb.blob_index) == (10, 11)


@pytest.mark.asyncio
async def test_never_confirms_when_disabled() -> None:
    t = MemoryDisperserTransport(confirm_after_polls=None)
    reply = await t.disperse(b"x")
    for _ in range(5):
        assert (await t.poll_status(reply.request_id)).status == BlobStatus.PROCESSING


@pytest.mark.asyncio
async def test_script_is_replayed_and_last_entry_repeats() -> None:
    script = [
        StatusReply(BlobStatus.PROCESSING),
        StatusReply(BlobStatus.FAILED),
    ]
    t = MemoryDisperserTransport(script=script)
    reply = await t.disperse(b"x")
    assert (await t.poll_status(reply.request_id)).status == BlobStatus.PROCESSING
    assert (await t.poll_status(reply.request_id)).status == BlobStatus.FAILED
    assert (await t.poll_status(reply.request_id)).status == BlobStatus.FAILED


@pytest.mark.asyncio
async def test_unknown_request_and_missing_blob_raise_transport_error() -> None:
    t = MemoryDisperserTransport()
    with pytest.raises(TransportError):
        await t.poll_status(b"\x00" * 32)
    with pytest.raises(TransportError):
        await t.retrieve(0, b"nope")


@pytest.mark.asyncio
async def test_store_raw_and_call_log() -> None:
    t = MemoryDisperserTransport()
    t.store_raw(3, b"\x09", b"raw")
    assert await t.retrieve(3, b"\x09") == b"raw"
    assert t.calls == [("retrieve", (3, b"\x09"))]


def test_negative_confirm_after_polls_rejected() -> None:
    with pytest.raises(ValueError):
        MemoryDisperserTransport(confirm_after_polls=-1)


def test_empty_script_rejected() -> None:
    with pytest.raises(ValueError):
        MemoryDisperserTransport(script=[])

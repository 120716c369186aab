import pytest

from core.exceptions import StreamConsumedError
from core.streams import OneShotStream


async def chunks(*parts):
    for part in parts:
        yield part


async def collect(stream):
    return [chunk async for chunk in stream]


@pytest.mark.asyncio
async def test_yields_chunks_lazily_and_skips_empty():
    stream = OneShotStream(chunks(b"a", b"", b"b"))
    assert not stream.consumed
    assert await collect(stream) == [b"a", b"b"]
    assert stream.consumed


@pytest.mark.asyncio
async def test_second_read_fails():
    stream = OneShotStream(chunks(b"a"), name="response")
    await collect(stream)

    with pytest.raises(StreamConsumedError, match="response stream has already been consumed"):
        await collect(stream)


@pytest.mark.asyncio
async def test_empty_source():
    assert await collect(OneShotStream(chunks())) == []

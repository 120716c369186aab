"""Single-consumption byte streams for request and response bodies."""

from collections.abc import AsyncIterable, AsyncIterator

from core.exceptions import StreamConsumedError


class OneShotStream:
    """Lazy async byte stream that can be iterated exactly once.

    Bodies are forwarded without buffering, so a second read cannot replay
    the data. Iterating again raises StreamConsumedError instead of yielding
    nothing.
    """

    def __init__(self, source: AsyncIterable[bytes], name: str = "body") -> None:
        self._source = source
        self._name = name
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise StreamConsumedError(f"{self._name} stream has already been consumed")
        self._consumed = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        async for chunk in self._source:
            if chunk:
                yield chunk

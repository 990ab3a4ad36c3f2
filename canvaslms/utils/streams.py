"""Typed async streams over paginated results, with pluggable error handling."""
from collections.abc import Callable
from enum import Enum
from typing import Any, Generic, TypeVar

from loguru import logger

from canvaslms.utils.pagination import Paginator, ResultStream

T = TypeVar('T')

# Called with the error and a callable that stops the stream when invoked
ErrorPolicy = Callable[[Exception, Callable[[], None]], None]


def fail_fast(error: Exception, cancel: Callable[[], None]) -> None:
    """Stop the stream and raise the error to whoever is iterating it."""
    cancel()
    raise error


def log_and_continue(error: Exception, cancel: Callable[[], None]) -> None:
    """Log the error and keep delivering objects from the other pages."""
    logger.warning(f'Skipping failed page: {error}')


def stop_on_error(error: Exception, cancel: Callable[[], None]) -> None:
    """Log the error and end the stream quietly."""
    logger.warning(f'Stopping stream after error: {error}')
    cancel()


class StreamState(Enum):
    RUNNING = 'running'
    DRAINING = 'draining'
    DONE = 'done'


class TypedStream(Generic[T]):
    """
    Async iterator over the objects of one pagination call.

    Errors are handed to ``on_error`` along with a ``cancel`` callable. If the
    policy cancels, iteration ends at once; page jobs still in flight finish on
    their own and their results are dropped. The default policy, :func:`fail_fast`,
    raises the first error out of the ``async for``.

    A stream serves a single call and cannot be restarted.
    """

    def __init__(self, source: Paginator[T] | ResultStream[T], on_error: ErrorPolicy = fail_fast) -> None:
        self._paginator = source if isinstance(source, Paginator) else None
        self._stream = source if isinstance(source, ResultStream) else None
        self._on_error = on_error
        self._cancelled = False
        self.state = StreamState.RUNNING
        self.delivered = 0
        self.errors: list[Exception] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    async def __aenter__(self) -> "TypedStream[T]":
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        await self.aclose()

    def __aiter__(self) -> "TypedStream[T]":
        return self

    async def __anext__(self) -> T:
        if self.state is not StreamState.RUNNING:
            raise StopAsyncIteration
        stream = await self._source()

        while not self._cancelled:
            received = await stream.select()
            if received is None:
                break
            if received.error is not None:
                self.errors.append(received.error)
                try:
                    self._on_error(received.error, self.cancel)
                except Exception:
                    await self._finish(stream)
                    raise
                continue
            self.delivered += 1
            return received.obj

        await self._finish(stream)
        raise StopAsyncIteration

    async def collect(self) -> list[T]:
        """Read the rest of the stream into a list."""
        return [obj async for obj in self]

    async def aclose(self) -> None:
        """Stop delivering objects. Safe to call more than once."""
        self.cancel()
        if self.state is StreamState.RUNNING:
            await self._finish(self._stream)

    async def _source(self) -> ResultStream[T]:
        if self._stream is None:
            assert self._paginator is not None
            self._stream = await self._paginator.start()
        return self._stream

    async def _finish(self, stream: ResultStream[T] | None) -> None:
        self.state = StreamState.DRAINING
        if stream is not None:
            await stream.aclose()
        self.state = StreamState.DONE
        if self.errors:
            logger.debug(f'Stream finished after {self.delivered} objects and {len(self.errors)} errors')

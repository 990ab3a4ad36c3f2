"""Concurrent page-numbered pagination for Canvas collection endpoints.

Canvas advertises the page count of a collection through the ``Link`` header of
the first page. The :class:`Paginator` reads that header, fetches the remaining
pages concurrently and pushes decoded objects and per-page errors onto a
:class:`ResultStream`. Objects arrive in completion order, not page order.
"""
import asyncio
from collections.abc import Callable, Sequence
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

import httpx
from httpx import QueryParams
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from canvaslms.exceptions import (
    CanvasError,
    DecodeError,
    PageCountUnavailableError,
    TransportError,
)
from canvaslms.utils.links import parse_response_links
from canvaslms.utils.validation import validate_concurrency, validate_per_page, validate_timeout

T = TypeVar('T')
M = TypeVar('M', bound=BaseModel)

DEFAULT_PER_PAGE = 10

PageDecoder = Callable[[int, bytes], Sequence[T]]


class Doer(Protocol):
    """Anything that can perform a request and hand back the raw response."""

    async def request(self, method: str, path: str, query: Any = None) -> httpx.Response:
        ...


class PageRequest(BaseModel):
    """The collection being paged through. Immutable once fetching starts."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: str
    query: QueryParams = Field(default_factory=QueryParams)
    per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1)

    @field_validator('query', mode='before')
    @classmethod
    def coerce_query(cls, value: Any) -> QueryParams:
        if value is None:
            return QueryParams()
        if isinstance(value, QueryParams):
            return value
        if isinstance(value, dict):
            value = {k: v for k, v in value.items() if v is not None}
        return QueryParams(value)

    def params_for(self, page: int) -> QueryParams:
        """Query for one page. Caller supplied keys win over ``page``/``per_page``."""
        base = QueryParams({'page': str(page), 'per_page': str(self.per_page)})
        return base.merge(self.query)


@dataclass(frozen=True)
class Received(Generic[T]):
    obj: T | None
    error: Exception | None


_CLOSED = object()


class ResultStream(Generic[T]):
    """
    A pair of queues carrying decoded objects and errors for one pagination call.

    The producer owns both queues and closes them together, exactly once.
    Consumers read with :meth:`select` or ``async for`` until both are closed.
    """

    _names = ('errors', 'objects')

    def __init__(self, pages: int = 0, per_page: int = DEFAULT_PER_PAGE) -> None:
        self.objects: asyncio.Queue = asyncio.Queue()
        self.errors: asyncio.Queue = asyncio.Queue()
        self.pages = pages
        self.per_page = per_page
        self._closed = False
        self._open = set(self._names)
        self._getters: dict[str, asyncio.Future] = {}

    @property
    def closed(self) -> bool:
        """True once the producer has closed the stream."""
        return self._closed

    @property
    def exhausted(self) -> bool:
        """True once the consumer has seen both queues close."""
        return not self._open

    def send(self, obj: T) -> None:
        if self._closed:
            raise RuntimeError('Cannot send on a closed ResultStream')
        self.objects.put_nowait(obj)

    def fail(self, error: Exception) -> None:
        if self._closed:
            raise RuntimeError('Cannot send on a closed ResultStream')
        self.errors.put_nowait(error)

    def close(self) -> None:
        if self._closed:
            raise RuntimeError('ResultStream is already closed')
        self._closed = True
        self.objects.put_nowait(_CLOSED)
        self.errors.put_nowait(_CLOSED)

    def _queue(self, name: str) -> asyncio.Queue:
        return self.errors if name == 'errors' else self.objects

    def _take(self, name: str, item: Any) -> Received[T] | None:
        if item is _CLOSED:
            self._open.discard(name)
            return None
        if name == 'errors':
            return Received(None, item)
        return Received(item, None)

    async def select(self) -> Received[T] | None:
        """
        Wait for whichever queue delivers first. Errors win a tie.

        :return: The next object or error, or None once both queues are closed
        """
        while self._open:
            for name in self._names:
                if name in self._open and name not in self._getters and not self._queue(name).empty():
                    received = self._take(name, self._queue(name).get_nowait())
                    if received is not None:
                        return received

            if not self._open:
                break

            for name in self._open:
                if name not in self._getters:
                    self._getters[name] = asyncio.ensure_future(self._queue(name).get())
            await asyncio.wait(list(self._getters.values()), return_when=asyncio.FIRST_COMPLETED)

            for name in self._names:
                getter = self._getters.get(name)
                if getter is None or not getter.done():
                    continue
                del self._getters[name]
                received = self._take(name, getter.result())
                if received is not None:
                    return received
        return None

    async def drain(self) -> tuple[int, int]:
        """
        Discard everything until both queues are closed.

        :return: Number of discarded objects and errors
        """
        objects = errors = 0
        async for received in self:
            if received.error is not None:
                errors += 1
            else:
                objects += 1
        return objects, errors

    async def aclose(self) -> None:
        """Stop reading. Pending reads are cancelled, producers are left alone."""
        for getter in self._getters.values():
            getter.cancel()
        self._getters.clear()
        self._open.clear()

    def __aiter__(self) -> "ResultStream[T]":
        return self

    async def __anext__(self) -> Received[T]:
        received = await self.select()
        if received is None:
            raise StopAsyncIteration
        return received


def model_decoder(model: type[M]) -> PageDecoder[M]:
    """
    Build a page decoder that validates a JSON array into pydantic models.

    :param model: The model every element of the page is validated against
    :return: A decoder for :class:`Paginator`
    """
    adapter = TypeAdapter(list[model])

    def decode(page: int, body: bytes) -> list[M]:
        try:
            return adapter.validate_json(body)
        except PydanticValidationError as e:
            raise DecodeError(f"Page {page} is not a list of {model.__name__}: {e}", page=page) from e

    return decode


class Paginator(Generic[T]):
    """
    Fetches every page of a collection concurrently.

    The first page is requested on its own: its ``Link`` header gives the page
    count. Pages 2..N are then fetched as separate tasks, at most
    ``max_concurrency`` at a time. A failing page puts one error on the stream
    and does not stop its siblings.
    """

    def __init__(
        self,
        doer: Doer,
        path: str,
        decode: PageDecoder[T],
        query: Any = None,
        per_page: int = DEFAULT_PER_PAGE,
        max_concurrency: int | None = None,
        page_timeout: float | None = None
    ) -> None:
        """
        :param doer: Transport performing the requests
        :param path: Collection path, relative to the API root
        :param decode: Callable turning (page number, body) into objects
        :param query: Extra query parameters sent with every page
        :param per_page: Results requested per page (default 10)
        :param max_concurrency: Page requests allowed in flight, None or 0 for no limit
        :param page_timeout: Seconds allowed for each page request, None for no limit
        :raises ValidationError: On an invalid page size, limit or timeout
        """
        validate_per_page(per_page)
        validate_concurrency(max_concurrency)
        validate_timeout(page_timeout)

        self.request = PageRequest(path=path, query=query, per_page=per_page)
        self.pages = 0
        self._doer = doer
        self._decode_fn = decode
        self._page_timeout = page_timeout
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
        self._stream: ResultStream[T] | None = None
        self._jobs: list[asyncio.Task] = []
        self._closer: asyncio.Task | None = None

    async def __aenter__(self) -> "Paginator[T]":
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        await self.aclose()

    @property
    def stream(self) -> ResultStream[T] | None:
        return self._stream

    async def start(self) -> ResultStream[T]:
        """
        Fetch the first page and schedule the rest.

        Errors on the first page are not raised: they are put on the returned
        stream, which is then closed without any further request.

        :return: The stream the pages are delivered to
        :raises RuntimeError: If this paginator was already started
        """
        if self._stream is not None:
            raise RuntimeError('Paginator has already been started')
        stream: ResultStream[T] = ResultStream(per_page=self.request.per_page)
        self._stream = stream

        try:
            first = await self._first_request()
        except CanvasError as e:
            logger.warning(f'Pagination of {self.request.path} failed on the first page: {e}')
            stream.fail(e)
            stream.close()
            return stream

        stream.pages = self.pages
        logger.debug(f'Fetching {self.pages} pages of {self.request.per_page} from {self.request.path}')

        self._jobs.append(asyncio.create_task(self._deliver(1, first)))
        for page in range(2, self.pages + 1):
            self._jobs.append(asyncio.create_task(self._fetch(page)))
        self._closer = asyncio.create_task(self._close_when_done())
        return stream

    async def collect(self) -> list[T]:
        """Fetch every page and return all objects, or raise the first error."""
        return await collect(await self.start())

    async def wait(self) -> None:
        """Wait until every page job has finished and the stream is closed."""
        if self._closer is not None:
            await asyncio.shield(self._closer)

    async def aclose(self) -> None:
        """Cancel any page job still running and close the stream."""
        for job in self._jobs:
            job.cancel()
        if self._closer is not None:
            await asyncio.gather(self._closer, return_exceptions=True)

    async def _first_request(self) -> httpx.Response:
        response = await self._get(1)
        links = parse_response_links(response, essential=('last',))
        last = links.get('last')
        if last is None:
            raise PageCountUnavailableError(f'Could not find last page of {self.request.path}')
        self.pages = last.page
        return response

    async def _get(self, page: int) -> httpx.Response:
        params = self.request.params_for(page)
        async with self._semaphore or nullcontext():
            try:
                call = self._doer.request('GET', self.request.path, params)
                if self._page_timeout is None:
                    return await call
                return await asyncio.wait_for(call, timeout=self._page_timeout)
            except TransportError:
                raise
            except asyncio.TimeoutError as e:
                raise TransportError(f'Page {page} of {self.request.path} timed out after {self._page_timeout}s') from e
            except Exception as e:
                raise TransportError(f'Page {page} of {self.request.path} failed: {e}') from e

    def _decode(self, page: int, response: httpx.Response) -> list[T]:
        try:
            return list(self._decode_fn(page, response.content))
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(f'Could not decode page {page} of {self.request.path}: {e}', page=page) from e

    async def _deliver(self, page: int, response: httpx.Response) -> None:
        assert self._stream is not None
        try:
            objects = self._decode(page, response)
        except DecodeError as e:
            logger.warning(str(e))
            self._stream.fail(e)
            return
        for obj in objects:
            self._stream.send(obj)
        logger.debug(f'Page {page}/{self.pages} of {self.request.path}: {len(objects)} objects')

    async def _fetch(self, page: int) -> None:
        assert self._stream is not None
        try:
            response = await self._get(page)
        except TransportError as e:
            logger.warning(str(e))
            self._stream.fail(e)
            return
        await self._deliver(page, response)

    async def _close_when_done(self) -> None:
        assert self._stream is not None
        try:
            await asyncio.gather(*self._jobs, return_exceptions=True)
        finally:
            self._stream.close()


async def collect(stream: ResultStream[T], capacity_hint: int = 0) -> list[T]:
    """
    Drain a stream into a list, in arrival order.

    On the first error the rest of the stream is read and discarded so no page
    job is left holding results, then the error is raised. No partial list is
    returned.

    :param stream: Stream returned by :meth:`Paginator.start`
    :param capacity_hint: Expected number of objects, 0 to estimate it from the stream
    :return: Every object from every page
    :raises CanvasError: The first error seen on the stream
    """
    # pages * per_page over-counts when the last page is partial
    expected = capacity_hint or stream.pages * stream.per_page
    logger.debug(f'Collecting up to {expected} objects from {stream.pages} pages')
    collection: list[T] = []
    async for received in stream:
        if received.error is not None:
            discarded, other_errors = await stream.drain()
            logger.error(
                f'Pagination failed after collecting {len(collection)} objects '
                f'({discarded} discarded, {other_errors} further errors): {received.error}'
            )
            raise received.error
        collection.append(received.obj)
    return collection

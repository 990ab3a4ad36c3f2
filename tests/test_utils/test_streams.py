"""Tests for typed streams and error policies."""
import pytest

from canvaslms.exceptions import PageCountUnavailableError, TransportError
from canvaslms.utils.pagination import Paginator, ResultStream
from canvaslms.utils.streams import (
    StreamState,
    TypedStream,
    fail_fast,
    log_and_continue,
    stop_on_error,
)


def five_pages():
    return {n: [{'id': n * 10 + 1}, {'id': n * 10 + 2}] for n in range(1, 6)}


class TestPolicies:
    """Tests for the provided error policies."""

    def test_fail_fast_cancels_and_raises(self):
        cancelled = []
        error = TransportError('boom')

        with pytest.raises(TransportError):
            fail_fast(error, lambda: cancelled.append(True))
        assert cancelled == [True]

    def test_log_and_continue_does_not_cancel(self):
        cancelled = []
        log_and_continue(TransportError('boom'), lambda: cancelled.append(True))
        assert cancelled == []

    def test_stop_on_error_cancels_without_raising(self):
        cancelled = []
        stop_on_error(TransportError('boom'), lambda: cancelled.append(True))
        assert cancelled == [True]


class TestTypedStream:
    """Tests for TypedStream."""

    @pytest.mark.asyncio
    async def test_yields_every_object(self, make_doer, decode_json):
        stream = TypedStream(Paginator(make_doer('files', five_pages()), 'files', decode_json))

        items = [item async for item in stream]

        assert len(items) == 10
        assert stream.delivered == 10
        assert stream.state is StreamState.DONE

    @pytest.mark.asyncio
    async def test_accepts_started_result_stream(self, make_doer, decode_json):
        source = await Paginator(make_doer('files', five_pages()), 'files', decode_json).start()
        assert len(await TypedStream(source).collect()) == 10

    @pytest.mark.asyncio
    async def test_default_policy_raises(self, make_doer, decode_json):
        """Without a handler, a page error aborts the iteration."""
        doer = make_doer('files', five_pages(), failures={3})
        stream = TypedStream(Paginator(doer, 'files', decode_json))

        with pytest.raises(TransportError):
            async for _ in stream:
                pass
        assert stream.state is StreamState.DONE
        assert stream.cancelled

    @pytest.mark.asyncio
    async def test_non_cancelling_policy_keeps_going(self, make_doer, decode_json):
        """Objects from the pages that succeeded are all delivered."""
        doer = make_doer('files', five_pages(), failures={2, 4})
        seen_errors = []

        def policy(error, cancel):
            seen_errors.append(error)

        stream = TypedStream(Paginator(doer, 'files', decode_json), on_error=policy)
        items = [item async for item in stream]

        assert sorted(item['id'] for item in items) == [11, 12, 31, 32, 51, 52]
        assert len(seen_errors) == 2
        assert stream.errors == seen_errors

    @pytest.mark.asyncio
    async def test_log_and_continue(self, make_doer, decode_json):
        doer = make_doer('files', five_pages(), failures={5})
        stream = TypedStream(Paginator(doer, 'files', decode_json), on_error=log_and_continue)

        assert len(await stream.collect()) == 8

    @pytest.mark.asyncio
    async def test_cancelling_policy_stops_delivery(self, make_doer, decode_json):
        """Nothing is delivered once the policy has cancelled."""
        doer = make_doer('files', five_pages(), failures={3}, delays={4: 0.05, 5: 0.05})
        paginator = Paginator(doer, 'files', decode_json)
        stream = TypedStream(paginator, on_error=stop_on_error)

        items = [item async for item in stream]
        await paginator.wait()

        assert stream.cancelled
        assert paginator.stream.closed
        assert stream.state is StreamState.DONE
        assert len(items) == stream.delivered
        # pages 4 and 5 answer after the error from page 3
        assert not {41, 42, 51, 52} & {item['id'] for item in items}
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_first_page_failure_goes_to_policy(self, make_doer, decode_json):
        doer = make_doer('files', five_pages(), link='')
        seen_errors = []

        stream = TypedStream(
            Paginator(doer, 'files', decode_json),
            on_error=lambda error, cancel: seen_errors.append(error),
        )

        assert await stream.collect() == []
        assert len(seen_errors) == 1
        assert isinstance(seen_errors[0], PageCountUnavailableError)

    @pytest.mark.asyncio
    async def test_aclose_stops_iteration(self, make_doer, decode_json):
        async with TypedStream(Paginator(make_doer('files', five_pages()), 'files', decode_json)) as stream:
            first = await stream.__anext__()
            assert first['id'] in {11, 12, 21, 22, 31, 32, 41, 42, 51, 52}

        assert stream.state is StreamState.DONE
        assert [item async for item in stream] == []

    @pytest.mark.asyncio
    async def test_aclose_before_start(self, make_doer, decode_json):
        doer = make_doer('files', five_pages())
        stream = TypedStream(Paginator(doer, 'files', decode_json))

        await stream.aclose()

        assert stream.state is StreamState.DONE
        assert doer.calls == []

    @pytest.mark.asyncio
    async def test_result_stream_source_closed_by_producer(self):
        source = ResultStream()
        source.send({'id': 1})
        source.fail(TransportError('boom'))
        source.send({'id': 2})
        source.close()

        stream = TypedStream(source, on_error=log_and_continue)

        assert [item['id'] async for item in stream] == [1, 2]
        assert len(stream.errors) == 1

"""Tests for the dispatch loop."""

import pytest
from starlette.responses import PlainTextResponse
from structlog.testing import capture_logs

from presenter_dispatch.core.errors import (
    BadRequestError,
    InvalidHandlerError,
    InvalidStateError,
    TooManyLoopsError,
)
from presenter_dispatch.dispatch import DEFAULT_MAX_LOOP, Dispatcher, DispatcherConfig
from presenter_dispatch.models import ForwardResponse, InternalRequest, JsonResponse
from tests.fixtures.handlers import StubFactory, fail, forward_to, respond


def chain_factory(forwards: int) -> StubFactory:
    """Factory where H0 forwards to H1 ... H<forwards> returns a response."""
    behaviours = {f"H{i}": forward_to(f"H{i + 1}") for i in range(forwards)}
    behaviours[f"H{forwards}"] = respond({"done": forwards})
    return StubFactory(behaviours)


@pytest.mark.unit
class TestDispatcherConfig:
    def test_default_max_loop(self) -> None:
        assert DispatcherConfig().max_loop == DEFAULT_MAX_LOOP == 20

    def test_negative_max_loop_rejected(self) -> None:
        with pytest.raises(ValueError):
            DispatcherConfig(max_loop=-1)


@pytest.mark.unit
class TestDispatcherProcess:
    """Test Dispatcher.process."""

    async def test_none_request_raises_invalid_state(self) -> None:
        dispatcher = Dispatcher(StubFactory({}))

        with pytest.raises(InvalidStateError):
            await dispatcher.process(None)

        assert len(dispatcher.trail) == 0
        assert dispatcher.handler is None

    async def test_none_request_rejected_after_successful_dispatch(self) -> None:
        factory = StubFactory({"Homepage": respond({"ok": True})})
        dispatcher = Dispatcher(factory)
        await dispatcher.process(InternalRequest(handler_name="Homepage"))
        handler = dispatcher.handler

        with pytest.raises(InvalidStateError):
            await dispatcher.process(None)

        assert dispatcher.trail.handler_names() == ["Homepage"]
        assert dispatcher.handler is handler
        assert factory.run_count == 1

    async def test_single_handler_terminal_response(self) -> None:
        factory = StubFactory({"Homepage": respond({"ok": True})})
        dispatcher = Dispatcher(factory)
        request = InternalRequest(handler_name="Homepage", method="GET")

        response = await dispatcher.process(request)

        assert response == JsonResponse({"ok": True})
        assert dispatcher.trail.requests == (request,)
        assert dispatcher.handler is factory.created[0]

    async def test_follows_forward_chain(self) -> None:
        factory = StubFactory({"A": forward_to("B", id=7), "B": respond("R")})
        dispatcher = Dispatcher(factory)

        response = await dispatcher.process(InternalRequest(handler_name="A", method="GET"))

        assert response == JsonResponse("R")
        assert dispatcher.trail.handler_names() == ["A", "B"]
        assert dispatcher.trail.last is not None
        assert dispatcher.trail.last.is_forward
        assert dispatcher.trail.last.params == {"id": 7}
        assert factory.created_names == ["A", "B"]

    @pytest.mark.parametrize("forwards", [0, 1, 5, 19, 20])
    async def test_chain_within_bound_runs_each_handler_once(self, forwards: int) -> None:
        factory = chain_factory(forwards)
        dispatcher = Dispatcher(factory)

        response = await dispatcher.process(InternalRequest(handler_name="H0"))

        assert response == JsonResponse({"done": forwards})
        assert factory.run_count == forwards + 1
        assert len(dispatcher.trail) == forwards + 1

    @pytest.mark.parametrize("max_loop", [0, 1, 3, 20])
    async def test_chain_beyond_bound_raises_too_many_loops(self, max_loop: int) -> None:
        factory = chain_factory(max_loop + 5)
        dispatcher = Dispatcher(factory, DispatcherConfig(max_loop=max_loop))

        with pytest.raises(TooManyLoopsError) as exc_info:
            await dispatcher.process(InternalRequest(handler_name="H0"))

        assert exc_info.value.max_loop == max_loop
        assert factory.run_count == max_loop + 1
        assert len(dispatcher.trail) == max_loop + 1

    async def test_infinite_self_forward_is_bounded(self) -> None:
        factory = StubFactory({"Loop": forward_to("Loop")})
        dispatcher = Dispatcher(factory, DispatcherConfig(max_loop=4))

        with capture_logs() as logs, pytest.raises(TooManyLoopsError):
            await dispatcher.process(InternalRequest(handler_name="Loop"))

        assert factory.run_count == 5
        warnings = [log for log in logs if log["event"] == "dispatch_too_many_loops"]
        assert len(warnings) == 1
        assert warnings[0]["max_loop"] == 4

    async def test_none_result_raises_bad_request_on_that_iteration(self) -> None:
        factory = StubFactory({"A": forward_to("B"), "B": lambda request: None})
        dispatcher = Dispatcher(factory)

        with pytest.raises(BadRequestError, match="Nullable"):
            await dispatcher.process(InternalRequest(handler_name="A"))

        assert dispatcher.trail.handler_names() == ["A", "B"]
        assert factory.run_count == 2

    async def test_unrecognized_result_raises_invalid_state(self) -> None:
        factory = StubFactory({"A": lambda request: {"not": "a response"}})
        dispatcher = Dispatcher(factory)

        with pytest.raises(InvalidStateError, match="dict"):
            await dispatcher.process(InternalRequest(handler_name="A"))

    async def test_transport_native_response_is_terminal(self) -> None:
        native = PlainTextResponse("native")
        factory = StubFactory({"A": lambda request: native})

        response = await Dispatcher(factory).process(InternalRequest(handler_name="A"))

        assert response is native

    async def test_awaitable_result_is_awaited(self) -> None:
        async def behaviour(request: InternalRequest) -> ForwardResponse:
            return ForwardResponse(InternalRequest.forward_to("B"))

        factory = StubFactory({"A": behaviour, "B": respond("async")})

        response = await Dispatcher(factory).process(InternalRequest(handler_name="A"))

        assert response == JsonResponse("async")

    async def test_handler_exception_propagates(self) -> None:
        error = RuntimeError("boom")
        factory = StubFactory({"A": forward_to("B"), "B": fail(error)})
        dispatcher = Dispatcher(factory)

        with pytest.raises(RuntimeError) as exc_info:
            await dispatcher.process(InternalRequest(handler_name="A"))

        assert exc_info.value is error
        assert dispatcher.handler is factory.created[-1]

    async def test_factory_failure_propagates(self) -> None:
        factory = StubFactory({"A": forward_to("Missing")})
        dispatcher = Dispatcher(factory)

        with pytest.raises(InvalidHandlerError):
            await dispatcher.process(InternalRequest(handler_name="A"))

        assert dispatcher.trail.handler_names() == ["A", "Missing"]

    async def test_handler_receives_clone(self) -> None:
        def mutate(request: InternalRequest) -> JsonResponse:
            request.params["injected"] = True
            return JsonResponse(None)

        factory = StubFactory({"A": mutate})
        dispatcher = Dispatcher(factory)
        original = InternalRequest(handler_name="A", params={"id": 1})

        await dispatcher.process(original)

        received = factory.created[0].received[0]
        assert received is not original
        assert received == original.with_params(injected=True)
        assert dispatcher.trail[0].params == {"id": 1}

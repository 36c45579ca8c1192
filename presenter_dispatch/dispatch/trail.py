"""Ordered history of the requests processed by one dispatcher."""

from collections.abc import Iterator

from presenter_dispatch.models.requests import InternalRequest


class RequestTrail:
    """Append-only sequence of internal requests."""

    def __init__(self) -> None:
        self._requests: list[InternalRequest] = []

    def append(self, request: InternalRequest) -> None:
        self._requests.append(request)

    @property
    def last(self) -> InternalRequest | None:
        return self._requests[-1] if self._requests else None

    @property
    def requests(self) -> tuple[InternalRequest, ...]:
        return tuple(self._requests)

    def handler_names(self) -> list[str]:
        return [request.handler_name for request in self._requests]

    def __len__(self) -> int:
        return len(self._requests)

    def __iter__(self) -> Iterator[InternalRequest]:
        return iter(tuple(self._requests))

    def __getitem__(self, index: int) -> InternalRequest:
        return self._requests[index]

    def __repr__(self) -> str:
        return f"RequestTrail({self.handler_names()!r})"

"""Internal request model passed between the dispatcher and handlers."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class InternalRequest(BaseModel):
    """Request addressed to a handler by name.

    Instances are frozen. Handlers receive a ``clone()`` so the copy held by
    the dispatcher's trail cannot be changed through the mutable containers.
    """

    FORWARD: ClassVar[str] = "FORWARD"

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    handler_name: str = Field(min_length=1, description="Name of the target handler")
    method: str | None = Field(
        default=None,
        description="HTTP method of the originating request, or FORWARD",
    )
    params: dict[str, Any] = Field(default_factory=dict)
    flags: dict[str, bool] = Field(default_factory=dict)

    @classmethod
    def forward_to(
        cls, handler_name: str, params: dict[str, Any] | None = None
    ) -> "InternalRequest":
        """Build an internal forward request for ``handler_name``."""
        return cls(handler_name=handler_name, method=cls.FORWARD, params=params or {})

    @property
    def is_forward(self) -> bool:
        return self.method == self.FORWARD

    def is_method(self, method: str) -> bool:
        return self.method is not None and self.method.upper() == method.upper()

    def get_parameter(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)

    def has_flag(self, name: str) -> bool:
        return bool(self.flags.get(name, False))

    def with_params(self, **params: Any) -> "InternalRequest":
        """Return a copy with ``params`` merged over the existing parameters."""
        return self.model_copy(update={"params": {**self.params, **params}})

    def clone(self) -> "InternalRequest":
        return self.model_copy(
            update={
                "params": dict(self.params),
                "flags": dict(self.flags),
            }
        )

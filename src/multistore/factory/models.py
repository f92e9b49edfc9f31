"""Singleton factory configuration and binding state."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from multistore.store.core import MultiStore

PreCreateHook = Callable[[Any], Awaitable[None] | None]
"""Signature: (owner) -> None"""

PostCreateHook = Callable[[Any, "MultiStore"], Awaitable[None] | None]
"""Signature: (owner, instance) -> None"""

Constructor = Callable[[list[Any]], "Awaitable[MultiStore] | MultiStore"]
"""Signature: (drivers) -> MultiStore"""


class BindingState(Enum):
    """Lifecycle of a singleton binding. Absent bindings are not stored."""

    CONSTRUCTING = auto()
    """One caller is building the instance; everyone else waits."""

    BOUND = auto()
    """Instance is cached and returned immediately."""

    FAILED = auto()
    """Construction raised; waiters re-raise and the binding is dropped."""


@dataclass
class SingletonConfig:
    """Configuration for singleton().

    Timeouts are in milliseconds. None means "use StoreSettings".
    """

    timeout: int | None = None
    """How long waiters wait for another caller's construction. 0 waits forever."""

    poll_interval: int | None = None
    """How often waiters check whether construction finished."""

    precreate: PreCreateHook | None = None
    """Awaited before construction. Runs once per binding."""

    postcreate: PostCreateHook | None = None
    """Awaited after construction, before the instance is published."""

    drivers: Sequence[Any] = field(default_factory=list)
    """Drivers passed to the constructor."""

    create: Constructor | None = None
    """Custom constructor replacing the default create(drivers)."""

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {self.timeout}")
        if self.poll_interval is not None and self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {self.poll_interval}")


@dataclass
class Binding:
    """One owner's singleton slot.

    Holds a strong reference to the owner so its id() cannot be reused
    while the binding exists.
    """

    owner: Any
    state: BindingState = BindingState.CONSTRUCTING
    instance: MultiStore | None = None
    error: BaseException | None = None

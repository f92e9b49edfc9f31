"""Store construction and singleton binding."""

from multistore.factory.core import (
    SingletonRegistry,
    create,
    default_registry,
    release,
    singleton,
)
from multistore.factory.models import BindingState, SingletonConfig

__all__ = [
    "create",
    "singleton",
    "release",
    "default_registry",
    "SingletonRegistry",
    "SingletonConfig",
    "BindingState",
]

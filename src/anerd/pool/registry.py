"""Maps the ``pool_type`` setting to a pool class.

Pool modules add themselves with ``@register_pool("<type>")`` when
imported; ``anerd.pool`` imports both built-in kinds, so ``"device"`` and
``"memory"`` are always known.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from anerd.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from anerd.pool.base import EntropyPool

_POOL_TYPES: dict[str, type[EntropyPool]] = {}


def register_pool(pool_type: str) -> Callable[[type[EntropyPool]], type[EntropyPool]]:
    """Class decorator binding *pool_type* to the decorated pool class."""

    def decorator(pool_cls: type[EntropyPool]) -> type[EntropyPool]:
        _POOL_TYPES[pool_type] = pool_cls
        return pool_cls

    return decorator


def pool_class(pool_type: str) -> type[EntropyPool]:
    """Return the class registered for *pool_type*.

    Raises:
        ConfigValidationError: If no pool kind has that name.
    """
    try:
        return _POOL_TYPES[pool_type]
    except KeyError:
        known = ", ".join(sorted(_POOL_TYPES))
        raise ConfigValidationError(f"Unknown pool_type {pool_type!r} (expected one of: {known})") from None

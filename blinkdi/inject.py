"""
Inject

Class-level marker for declarative property injection.

When the container reflects a class, every ``Inject`` attribute becomes a
property reference on the generated definition. The dependency is written
onto the instance after construction, shadowing the marker:

    class BasicAccess:
        auth: Auth = Inject()
        identity: str = Inject("auth.basic-access.identity")

        def process(self, request): ...

This is similar to property injection attributes in PHP containers.
"""

from typing import Any, Optional, Type

from .identifiers import Identifier, identifier_of


class Inject:
    """
    Descriptor marking a class attribute for property injection.

    Attributes:
        target: Identifier to resolve, or None to use the attribute annotation
        guarded: Write the value with ``object.__setattr__``

    Example::

        class MyService:
            repository: UserRepository = Inject()
            cache = Inject("cache.default")
    """

    def __init__(self, target: Optional[Identifier] = None, guarded: bool = False):
        """
        Initialize the marker.

        Args:
            target: Identifier or class to inject; defaults to the annotation
            guarded: Bypass normal attribute assignment when injecting
        """
        self.target = identifier_of(target) if target is not None else None
        self.guarded = guarded
        self._attr_name: Optional[str] = None

    def __set_name__(self, owner: Type, name: str) -> None:
        self._attr_name = name

    def __get__(self, obj: Optional[object], objtype: Optional[Type] = None) -> Any:
        """
        Return the marker on class access.

        Instance access only reaches here when nothing was injected,
        since the injected value lives in the instance ``__dict__``.

        Raises:
            AttributeError: When accessed on an instance that was not built
                by a container
        """
        if obj is None:
            return self

        raise AttributeError(
            f"'{type(obj).__name__}.{self._attr_name}' was not injected. "
            f"Build the instance with container.get() or container.make()."
        )

    def __repr__(self) -> str:
        """Return a string representation of the marker."""
        return f"Inject({self.target or self._attr_name!r})"

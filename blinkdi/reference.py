"""
Reference

A single dependency slot: one constructor argument or one injectable
property. A reference either points at another identifier, which the
container resolves with ``get()``, or holds a literal value.
"""

from typing import Any, Optional

from .identifiers import Identifier, identifier_of

_UNSET = object()


class Reference:
    """Binding target for one constructor argument or one property.

    Exactly one of ``referent_name`` and ``value`` is set once the reference
    is configured. Setting one clears the other.

    Attributes:
        name: The parameter or property name
        guarded: Assign through ``object.__setattr__`` instead of ``setattr``
        keyword: Pass the argument by name (keyword-only parameters)

    Example::

        reference = Reference("logger")
        reference.reference_to(Logger)      # resolved via container.get()

        reference = Reference("name")
        reference.with_value("default")     # used as-is
    """

    def __init__(self, name: str, keyword: bool = False):
        self.name = name
        self.keyword = keyword
        self.guarded = False
        self._referent: Optional[str] = None
        self._value: Any = _UNSET

    def reference_to(self, target: Identifier) -> 'Reference':
        """Point this reference at another identifier.

        Args:
            target: Identifier string or class

        Returns:
            self, for chaining
        """
        self._referent = identifier_of(target)
        self._value = _UNSET
        return self

    def with_value(self, value: Any) -> 'Reference':
        """Bind this reference to a literal value (``None`` included).

        Returns:
            self, for chaining
        """
        self._value = value
        self._referent = None
        return self

    def guard(self, guarded: bool = True) -> 'Reference':
        """Mark the reference as guarded.

        Returns:
            self, for chaining
        """
        self.guarded = guarded
        return self

    @property
    def referent_name(self) -> Optional[str]:
        return self._referent

    @property
    def value(self) -> Any:
        return None if self._value is _UNSET else self._value

    @property
    def is_referent(self) -> bool:
        return self._referent is not None

    @property
    def has_target(self) -> bool:
        return self._referent is not None or self._value is not _UNSET

    def __repr__(self) -> str:
        if self._referent is not None:
            target = f"-> {self._referent}"
        elif self._value is not _UNSET:
            target = f"= {self._value!r}"
        else:
            target = "unset"
        flags = " guarded" if self.guarded else ""
        return f"Reference({self.name} {target}{flags})"

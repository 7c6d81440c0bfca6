"""
Definition

Data classes describing how the container builds one identifier
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Type, TYPE_CHECKING

from .exceptions import DefinitionError
from .identifiers import locate
from .reference import Reference

if TYPE_CHECKING:
    from .container import Container

# Factory signature: receives the resolving container, returns the instance
Factory = Callable[['Container'], Any]


@dataclass
class ConstructorDefinition:
    """Ordered constructor arguments"""
    arguments: List[Reference] = field(default_factory=list)

    def have_argument(self, name: str, keyword: bool = False) -> Reference:
        """Return the argument reference called ``name``, creating it if needed.

        New arguments are appended, so declaration order is positional order.
        """
        for reference in self.arguments:
            if reference.name == name:
                return reference
        reference = Reference(name, keyword=keyword)
        self.arguments.append(reference)
        return reference


@dataclass
class ObjectDefinition:
    """Recipe for building one identifier.

    Attributes:
        name: The identifier this definition is registered under
        type: Class to instantiate. When None and ``blank`` is False the
            class is located from ``name`` on first use
        constructor: Constructor arguments, or None for a plain ``cls()``
        properties: References assigned onto the instance after construction
        factory: Replaces constructor and property injection entirely
        blank: Definition has no underlying type (``with_definition``)

    Example::

        definition = ObjectDefinition("app.Widget")
        definition.have_constructor().have_argument("logger").reference_to(Logger)
        definition.have_property("__cache", guarded=True).reference_to("cache")
    """
    name: str
    type: Optional[Type] = None
    constructor: Optional[ConstructorDefinition] = None
    properties: List[Reference] = field(default_factory=list)
    factory: Optional[Factory] = None
    blank: bool = False

    def have_constructor(self) -> ConstructorDefinition:
        """Declare that the type has a constructor and return it."""
        if self.constructor is None:
            self.constructor = ConstructorDefinition()
        return self.constructor

    def have_property(self, name: str, guarded: bool = False) -> Reference:
        """Return the property reference called ``name``, creating it if needed."""
        for reference in self.properties:
            if reference.name == name:
                if guarded:
                    reference.guard()
                return reference
        reference = Reference(name).guard(guarded)
        self.properties.append(reference)
        return reference

    def with_factory(self, factory: Optional[Factory]) -> 'ObjectDefinition':
        """Attach or replace (None clears) the factory."""
        self.factory = factory
        return self

    def resolve_type(self) -> Optional[Type]:
        """Return the class to instantiate, locating it from the name if needed."""
        if self.type is None and not self.blank:
            self.type = locate(self.name)
        return self.type

    def validate(self) -> 'ObjectDefinition':
        """Check every reference has a target.

        Raises:
            DefinitionError: When a constructor argument or property
                was declared without ``reference_to`` or ``with_value``
        """
        arguments = self.constructor.arguments if self.constructor else []
        for kind, references in (("argument", arguments), ("property", self.properties)):
            for reference in references:
                if not reference.has_target:
                    raise DefinitionError(
                        f"Definition '{self.name}' has {kind} '{reference.name}' "
                        f"without a target. Call reference_to() or with_value() on it."
                    )
        return self

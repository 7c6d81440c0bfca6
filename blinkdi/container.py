"""
Container

This module provides the resolution engine of blinkdi. It is responsible for:

- Storing definitions, aliases and the singleton cache
- Building definitions from class signatures on first use
- Resolving constructor and property dependencies recursively
- Falling back to delegate containers
- Detecting circular references

Example::

    container = Container()
    widget = container.get(Widget)          # reflected, built, cached
    assert container.get(Widget) is widget  # singleton
    fresh = container.make(Widget)          # always a new instance
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from .capabilities import Configurable, ContainerAware
from .definition import ObjectDefinition
from .exceptions import (
    BlinkDIError,
    CircularReferenceError,
    ConstructionError,
    ContainerClosedError,
    DefinitionError,
    NotFoundError,
)
from .identifiers import Identifier, identifier_of, locate
from .object_spec import ConfiguredSpec, Factory, Instance, coerce_spec
from .reference import Reference
from .reflector import Reflector

logger = logging.getLogger(__name__)

Configurator = Callable[[ObjectDefinition], Any]


class Container:
    """Inversion-of-control container with singleton caching and delegation.

    Identifiers are strings; classes are accepted anywhere an identifier is
    and are normalized to ``"module.QualName"``.

    Attributes:
        _definitions: Identifier to definition, None memoizes "not a class"
        _definition_errors: Identifier to the DefinitionError raised reflecting it
        _loaded_items: Singleton cache populated by get()
        _aliases: Alias to canonical identifier
        _delegates: Fallback containers, consulted in order
        _loading_items: Identifiers currently under construction, in order

    Note:
        Every operation holds a per-container re-entrant lock, so a container
        may be shared between threads.
    """

    def __init__(self, delegates: Optional[List['Container']] = None):
        """Initialize an empty container.

        Args:
            delegates: Containers consulted, in order, for identifiers this
                container cannot resolve
        """
        self._delegates: List[Container] = list(delegates or [])
        self._definitions: Dict[str, Optional[ObjectDefinition]] = {}
        self._definition_errors: Dict[str, DefinitionError] = {}
        self._loaded_items: Dict[str, Any] = {}
        self._loading_items: Dict[str, None] = {}
        self._aliases: Dict[str, str] = {}
        self._reflector = Reflector()
        self._lock = threading.RLock()
        self._closed = False

    def _ensure_not_closed(self) -> None:
        if self._closed:
            raise ContainerClosedError("This container is already closed")

    def _canonical(self, key: Identifier) -> str:
        name = identifier_of(key)
        return self._aliases.get(name, name)

    # Registration

    def define(self, name: Identifier, configurator: Optional[Configurator] = None) -> ObjectDefinition:
        """Register a new, empty definition for ``name``.

        Any previous definition (or memoized failure) for ``name`` is replaced.
        Cached singletons are left alone; call ``unset()`` to rebuild them.

        Args:
            name: Identifier or class
            configurator: Called with the new definition to populate it

        Returns:
            The stored definition

        Raises:
            DefinitionError: When the configurator leaves a reference without
                a target

        Example::

            container.define("mailer", lambda d: (
                d.have_constructor().have_argument("host").with_value("smtp.local")
            ))
        """
        with self._lock:
            self._ensure_not_closed()
            identifier = identifier_of(name)
            definition = ObjectDefinition(identifier, type=name if isinstance(name, type) else None)
            if configurator is not None:
                configurator(definition)
            definition.validate()

            self._definition_errors.pop(identifier, None)
            self._definitions[identifier] = definition
            logger.debug("Defined %s", identifier)
            return definition

    def with_definition(self, name: Identifier) -> ObjectDefinition:
        """Register a blank definition with no underlying type.

        Use for services built entirely by a factory::

            container.with_definition("clock").with_factory(lambda c: time.monotonic)
        """
        with self._lock:
            self._ensure_not_closed()
            identifier = identifier_of(name)
            definition = ObjectDefinition(identifier, blank=True)
            self._definition_errors.pop(identifier, None)
            self._definitions[identifier] = definition
            return definition

    def extend(self, name: Identifier, configurator: Optional[Configurator] = None) -> Optional[ObjectDefinition]:
        """Modify the existing (possibly reflected) definition in place.

        Args:
            name: Identifier or class
            configurator: Called with the live definition

        Returns:
            The definition, or None when ``name`` has no definition

        Example::

            container.extend(Widget, lambda d: d.have_property("debug").with_value(True))
        """
        with self._lock:
            self._ensure_not_closed()
            definition = self.load_definition(name)
            if configurator is not None and definition is not None:
                configurator(definition)
                definition.validate()
            return definition

    def alias(self, name: Identifier, alias: str) -> None:
        """Redirect lookups of ``alias`` to ``name``."""
        with self._lock:
            self._ensure_not_closed()
            self._aliases[alias] = identifier_of(name)

    def set(self, name: Identifier, value: Any) -> None:
        """Bind a pre-built value to ``name``.

        The value becomes the cached singleton, and a factory returning it is
        defined so that ``has()`` and ``make()`` agree with ``get()``.

        Example::

            container.set("auth.basic-access.identity", "email")
        """
        with self._lock:
            self._ensure_not_closed()
            identifier = identifier_of(name)
            self.with_definition(identifier).with_factory(lambda container: value)
            self._loaded_items[identifier] = value

    # Definition loading

    def load_definition(self, name: Identifier) -> Optional[ObjectDefinition]:
        """Return the definition for ``name``, reflecting its class on first use.

        Results are memoized permanently: an identifier that does not name a
        class returns None without being looked up again, and one whose
        reflection failed re-raises the same DefinitionError.

        Raises:
            DefinitionError: When the class's constructor cannot be satisfied
        """
        with self._lock:
            self._ensure_not_closed()
            identifier = identifier_of(name)

            if identifier in self._definitions:
                return self._definitions[identifier]
            if identifier in self._definition_errors:
                raise self._definition_errors[identifier]

            cls = locate(identifier)
            if cls is None:
                self._definitions[identifier] = None
                return None

            try:
                definition = self._reflector.reflect(identifier, cls)
            except DefinitionError as e:
                self._definition_errors[identifier] = e
                raise

            self._definitions[identifier] = definition
            return definition

    # Resolution

    def make(
        self,
        name: Identifier,
        parameters: Optional[Mapping[str, Any]] = None,
        config: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """Build a new instance of ``name``, bypassing the singleton cache.

        Aliases are not applied; use ``get()`` for alias-aware lookups.

        Args:
            name: Identifier or class
            parameters: Constructor argument values by name, overriding the
                definition
            config: Replaces the last constructor argument of ``Configurable``
                classes

        Returns:
            The newly created instance

        Raises:
            NotFoundError: When no definition can be loaded
            CircularReferenceError: When ``name`` is already being built
            ConstructionError: When the factory, constructor or property
                injection fails
        """
        with self._lock:
            self._ensure_not_closed()
            identifier = identifier_of(name)
            definition = self.load_definition(identifier)
            if definition is None:
                raise NotFoundError(f"Unable to load definition for '{identifier}'")

            if identifier in self._loading_items:
                cycle = " -> ".join(list(self._loading_items) + [identifier])
                raise CircularReferenceError(f"Circular reference detected: {cycle}")

            self._loading_items[identifier] = None
            try:
                return self._create_object(definition, parameters or {}, dict(config or {}))
            finally:
                del self._loading_items[identifier]

    def make2(self, spec: Any, parameters: Optional[Mapping[str, Any]] = None) -> Any:
        """Build an object from a loosely-shaped specification.

        Args:
            spec: An ObjectSpec, identifier, class, ``{"class": ..., **config}``
                mapping, zero-argument callable, or an existing instance
            parameters: Passed to ``make()`` for identifier-based specs

        Raises:
            ConfigurationShapeError: When the spec has an unsupported shape

        Example::

            container.make2("app.Mailer")
            container.make2({"class": Mailer, "host": "smtp.local"})
            container.make2(lambda: Mailer(None))
        """
        spec = coerce_spec(spec)
        if isinstance(spec, Instance):
            return spec.value
        if isinstance(spec, Factory):
            return spec.fn()
        if isinstance(spec, ConfiguredSpec):
            return self.make(spec.name, parameters, spec.config)
        return self.make(spec.name, parameters)

    def get(self, id: Identifier) -> Any:
        """Return the shared instance for ``id``.

        Resolution order:
        1. Apply aliases
        2. Return the cached singleton, if any
        3. Build from a local definition and cache it
        4. Ask delegates in order; the first that has ``id`` supplies it,
           and the result is not cached here

        Raises:
            NotFoundError: When neither this container nor a delegate
                can resolve ``id``
        """
        with self._lock:
            self._ensure_not_closed()
            identifier = self._canonical(id)

            if identifier in self._loaded_items:
                return self._loaded_items[identifier]

            if self.load_definition(identifier) is not None:
                instance = self.make(identifier)
                self._loaded_items[identifier] = instance
                return instance

            for delegate in self._delegates:
                if delegate.has(identifier):
                    logger.debug("Resolving %s from delegate %r", identifier, delegate)
                    return delegate.get(identifier)

            registered = ", ".join(
                sorted(k for k, v in self._definitions.items() if v is not None)
            ) or "None"
            raise NotFoundError(
                f"No entry was found for identifier: {identifier}\n"
                f"Registered identifiers: {registered}\n"
                f"Hint: container.define({identifier!r}, ...)"
            )

    def has(self, id: Identifier) -> bool:
        """Return True if ``get(id)`` would not raise NotFoundError.

        ``has()`` returning True does not mean ``get()`` cannot fail; the
        constructor may still raise.

        Raises:
            DefinitionError: When ``id`` names a class that cannot be reflected
        """
        with self._lock:
            self._ensure_not_closed()
            identifier = self._canonical(id)
            if self.load_definition(identifier) is not None:
                return True
            return any(delegate.has(identifier) for delegate in self._delegates)

    def unset(self, id: Identifier) -> None:
        """Evict ``id`` from the singleton cache; its definition is kept."""
        with self._lock:
            self._ensure_not_closed()
            identifier = self._canonical(id)
            if identifier in self._loaded_items:
                del self._loaded_items[identifier]
                logger.debug("Evicted %s", identifier)

    # Instantiation

    def _create_object(
        self,
        definition: ObjectDefinition,
        parameters: Mapping[str, Any],
        config: Dict[str, Any]
    ) -> Any:
        """Build an instance from a definition.

        Raises:
            ConstructionError: Wrapping non-blinkdi exceptions raised while
                building, so callers can tell broken services from unknown ones
        """
        if definition.factory is not None:
            try:
                return definition.factory(self)
            except BlinkDIError:
                raise
            except Exception as e:
                raise ConstructionError(
                    f"Factory for '{definition.name}' raised an exception: {e}"
                ) from e

        cls = definition.resolve_type()
        if cls is None:
            raise ConstructionError(
                f"Definition '{definition.name}' has no factory and does not "
                f"name a class. Attach one with with_factory()."
            )

        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        if definition.constructor is not None:
            for reference in definition.constructor.arguments:
                if reference.name in parameters:
                    value = parameters[reference.name]
                else:
                    value = self._resolve_reference(reference)
                if reference.keyword:
                    kwargs[reference.name] = value
                else:
                    args.append(value)

        if issubclass(cls, Configurable):
            arguments = definition.constructor.arguments if definition.constructor else []
            if not arguments:
                args.append(config)
            elif arguments[-1].keyword:
                kwargs[arguments[-1].name] = config
            else:
                args[-1] = config

        logger.debug("Building %s", definition.name)
        try:
            instance = cls(*args, **kwargs)
        except BlinkDIError:
            raise
        except Exception as e:
            raise ConstructionError(
                f"Constructing '{definition.name}' ({cls.__name__}) raised an exception: {e}"
            ) from e

        self._inject_properties(instance, cls, definition.properties)

        if isinstance(instance, ContainerAware):
            instance.set_container(self)

        return instance

    def _resolve_reference(self, reference: Reference) -> Any:
        if reference.is_referent:
            return self.get(reference.referent_name)
        return reference.value

    def _inject_properties(self, instance: Any, cls: Type, properties: List[Reference]) -> None:
        for reference in properties:
            value = self._resolve_reference(reference)
            try:
                if reference.guarded:
                    object.__setattr__(instance, _mangle(instance, cls, reference.name), value)
                else:
                    setattr(instance, reference.name, value)
            except (AttributeError, TypeError) as e:
                raise ConstructionError(
                    f"Cannot inject property '{reference.name}' into "
                    f"'{cls.__name__}': {e}"
                ) from e

    # Teardown

    def close(self) -> None:
        """Release definitions and cached instances.

        After closing, every operation raises ContainerClosedError.
        This method is idempotent.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._definitions.clear()
            self._definition_errors.clear()
            self._loaded_items.clear()
            self._aliases.clear()
            self._delegates.clear()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self) -> 'Container':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def __repr__(self) -> str:
        return f"<Container definitions={len(self._definitions)} loaded={len(self._loaded_items)}>"


def _mangle(instance: Any, cls: Type, name: str) -> str:
    """Apply private name mangling (``__x`` -> ``_Cls__x``).

    The class that owns the private field is searched along the MRO: the
    first mangled name already set on the instance, or declared in a
    class's ``__slots__`` or ``__annotations__``, wins. Otherwise ``cls``
    is used.
    """
    if not name.startswith('__') or name.endswith('__'):
        return name

    attrs = getattr(instance, '__dict__', {})
    for klass in type(instance).__mro__:
        mangled = f"_{klass.__name__.lstrip('_')}{name}"
        slots = vars(klass).get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        if (mangled in attrs
                or name in slots
                or mangled in vars(klass).get('__annotations__', {})):
            return mangled
    return f"_{cls.__name__.lstrip('_')}{name}"

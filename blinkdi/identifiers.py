"""
Identifiers

Maps classes to the string identifiers the container is keyed by, and
identifiers back to classes.

A class is identified by ``"{module}.{qualname}"``. Every class seen by
``identifier_of`` is remembered in a weak table so that classes defined
inside functions (which cannot be imported by path) are still locatable.
"""

import importlib
import inspect
from typing import Any, Optional, Type, Union
from weakref import WeakValueDictionary

# Identifier accepted by the public API: a string or a class
Identifier = Union[str, Type]

_known_types: 'WeakValueDictionary[str, Type]' = WeakValueDictionary()


def identifier_of(key: Identifier) -> str:
    """Normalize a string or class into a string identifier.

    Args:
        key: An identifier string, or a class

    Returns:
        The string identifier

    Raises:
        TypeError: When key is neither a string nor a class

    Example::

        >>> identifier_of("mailer")
        'mailer'
        >>> identifier_of(collections.OrderedDict)
        'collections.OrderedDict'
    """
    if isinstance(key, str):
        return key
    if inspect.isclass(key):
        name = f"{key.__module__}.{key.__qualname__}"
        _known_types[name] = key
        return name
    raise TypeError(
        f"Identifier must be a string or a class, got {type(key).__name__}"
    )


def locate(name: str) -> Optional[Type]:
    """Find the class an identifier names.

    Looks in the table of classes already seen, then tries to import the
    identifier as a dotted path (``package.module.Class`` or
    ``package.module.Outer.Inner``).

    Args:
        name: The identifier to look up

    Returns:
        The class, or None if the identifier does not name a class
    """
    cls = _known_types.get(name)
    if cls is not None:
        return cls

    parts = name.split('.')
    if not all(parts):
        return None

    # Longest importable module prefix wins
    for split in range(len(parts) - 1, 0, -1):
        module_name = '.'.join(parts[:split])
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError:
            continue
        for attr in parts[split:]:
            target = getattr(target, attr, None)
            if target is None:
                return None
        if inspect.isclass(target):
            _known_types[name] = target
            return target
        return None

    return None

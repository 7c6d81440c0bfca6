# Public API
from .capabilities import Configurable, ContainerAware
from .container import Container
from .definition import ConstructorDefinition, ObjectDefinition
from .exceptions import (
    BlinkDIError,
    CircularReferenceError,
    ConfigurationShapeError,
    ConstructionError,
    ContainerClosedError,
    DefinitionError,
    NotFoundError,
)
from .identifiers import identifier_of
from .inject import Inject
from .object_spec import ConfiguredSpec, Factory, Identifier, Instance
from .reference import Reference
from .reflector import Reflector

__all__ = [
    "Container",
    "ObjectDefinition",
    "ConstructorDefinition",
    "Reference",
    "Reflector",
    "identifier_of",
    # Capabilities
    "Configurable",
    "ContainerAware",
    "Inject",
    # make2 specs
    "Identifier",
    "Instance",
    "Factory",
    "ConfiguredSpec",
    # Exceptions
    "BlinkDIError",
    "DefinitionError",
    "NotFoundError",
    "ConstructionError",
    "ConfigurationShapeError",
    "CircularReferenceError",
    "ContainerClosedError",
]

__version__ = '0.1.0'

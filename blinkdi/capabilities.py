"""
Capabilities

Opt-in base classes the container recognizes while building instances.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .container import Container


class Configurable:
    """Marker for classes whose last constructor argument is a config dict.

    When the container builds a ``Configurable`` subclass, the last
    positional argument is replaced by the ``config`` mapping given to
    ``make()`` (or the extra keys of a ``make2({"class": ...})`` spec).

    Example::

        class Mailer(Configurable):
            def __init__(self, logger: Logger, config: dict = None):
                self.logger = logger
                self.host = (config or {}).get("host", "localhost")

        mailer = container.make(Mailer, config={"host": "smtp.local"})
    """

    pass


class ContainerAware(ABC):
    """Classes that want the owning container after construction.

    ``set_container`` is called by the container that built the instance,
    after property injection.
    """

    @abstractmethod
    def set_container(self, container: 'Container') -> None:
        pass

"""
Test Fixtures

Common test classes used across test modules
"""

from typing import Optional

from blinkdi import Configurable, ContainerAware, Inject


class Logger:
    """Test logger with no constructor"""
    pass


class Cache:
    """Test cache service"""

    def __init__(self):
        self.items = {}


class Widget:
    """Widget with a class dependency and a literal default"""

    def __init__(self, logger: Logger, name: str = "default"):
        self.logger = logger
        self.name = name


class Dashboard:
    """Nested dependency on Widget"""

    def __init__(self, widget: Widget, cache: Cache):
        self.widget = widget
        self.cache = cache


class PrivateLogging:
    """Keeps its logger in a private field"""

    def __init__(self):
        self.__logger = None

    def logger(self):
        return self.__logger


class ReadOnlyLogging:
    """Exposes its logger through a read-only property"""

    @property
    def logger(self):
        return self._logger


class Mailer(Configurable):
    """Configurable service whose last argument is a config dict"""

    def __init__(self, logger: Logger, config: Optional[dict] = None):
        self.logger = logger
        self.config = config or {}

    @property
    def host(self):
        return self.config.get("host", "localhost")


class Settings(Configurable):
    """Configurable service with only the config argument"""

    def __init__(self, config: Optional[dict] = None):
        self.config = config


class Locator(ContainerAware):
    """Looks up services lazily through its container"""

    def __init__(self):
        self.container = None

    def set_container(self, container):
        self.container = container

    def find(self, identifier):
        return self.container.get(identifier)


class BasicAccess:
    """Authentication middleware with declared property injection"""

    logger: Logger = Inject()
    identity: str = Inject("auth.basic-access.identity")
    __cache: Cache = Inject(guarded=True)

    def cache(self):
        return self.__cache


class ServiceWithoutHint:
    """Service with missing type hint - for error testing"""

    def __init__(self, dependency):  # No type hint, no default!
        self.dependency = dependency


class ServiceWithScalar:
    """Scalar annotation without a default - for error testing"""

    def __init__(self, logger: Logger, retries: int):
        self.logger = logger
        self.retries = retries


class Broken:
    """Constructor always fails"""

    def __init__(self, logger: Logger):
        raise RuntimeError("boom")


class KeywordOnly:
    """Keyword-only parameters are passed by name"""

    def __init__(self, logger: Logger, *, retries: int = 3):
        self.logger = logger
        self.retries = retries


class CycleA:
    def __init__(self, b: "CycleB"):
        self.b = b


class CycleB:
    def __init__(self, a: CycleA):
        self.a = a


class SelfReferencing:
    def __init__(self, other: "SelfReferencing"):
        self.other = other


class SubPrivateLogging(PrivateLogging):
    """Inherits its private logger field and accessor"""
    pass


class KeywordConfig(Configurable):
    """Config passed as a keyword-only argument"""

    def __init__(self, logger: Logger, *, config: Optional[dict] = None):
        self.logger = logger
        self.config = config


class PropertyCycleA:
    """Depends on PropertyCycleB through a property"""
    pass


class PropertyCycleB:
    def __init__(self, a: PropertyCycleA):
        self.a = a

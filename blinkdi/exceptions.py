"""
blinkdi Exceptions

Custom exception hierarchy for the blinkdi container
"""


class BlinkDIError(Exception):
    """
    Base exception for all blinkdi errors.

    All blinkdi-specific exceptions inherit from this class.
    You can catch this to handle any container error generically.

    Example:
        >>> try:
        ...     service = container.get(MyService)
        ... except BlinkDIError as e:
        ...     print(f"DI error: {e}")
    """

    pass


class DefinitionError(BlinkDIError):
    """
    Raised when a definition cannot be built or is invalid.

    This error occurs while reflecting a class constructor, or when a
    configurator leaves a reference without a target.

    Common causes:
        - A constructor parameter with no class annotation and no default
        - A builtin or C extension class whose signature cannot be inspected
        - ``have_argument("x")`` called without ``reference_to``/``with_value``
        - ``Inject()`` used on an attribute without an annotation

    Once raised for an identifier, the container remembers the failure and
    re-raises it on every lookup until the identifier is redefined with
    ``define()``.

    Solution:
        Annotate the parameter with a class, give it a default, or register
        the argument explicitly::

            container.define(Mailer, lambda d: (
                d.have_constructor().have_argument("host").with_value("localhost")
            ))
    """

    pass


class NotFoundError(BlinkDIError):
    """
    Raised when an identifier is unknown to the container and its delegates.

    This error is distinct from ``ConstructionError`` so callers can tell
    "unknown service" apart from "service is known but broken".

    Common causes:
        - Typo in the identifier
        - Dotted path that does not import to a class
        - Delegate container not passed to ``Container(delegates=[...])``

    Solution:
        Register the identifier before resolving it::

            container.define("mailer", lambda d: d.with_factory(
                lambda c: Mailer("localhost")
            ))
            mailer = container.get("mailer")

    Note:
        The error message includes a list of registered identifiers
        to help identify available services.
    """

    pass


class ConstructionError(BlinkDIError):
    """
    Raised when building an instance fails.

    Wraps the exception raised by a factory, a constructor, or a property
    assignment. The original exception is available as ``__cause__``.

    Common causes:
        - The constructor itself raised
        - A factory raised
        - A non-guarded property is read-only on the target
        - A blank definition (``with_definition``) has no factory attached
    """

    pass


class ConfigurationShapeError(BlinkDIError):
    """
    Raised by ``make2()`` when the object specification has an invalid shape.

    Common causes:
        - A mapping without the ``"class"`` key
        - ``None``, a number, or a list passed as a specification

    Solution:
        Pass an identifier, an instance, a zero-argument callable, or a
        mapping with a ``"class"`` key::

            container.make2({"class": "app.Mailer", "host": "localhost"})
    """

    pass


class CircularReferenceError(BlinkDIError):
    """
    Raised when an identifier is requested while it is still being built.

    Example of circular dependency::

        class ServiceA:
            def __init__(self, b: ServiceB): ...

        class ServiceB:
            def __init__(self, a: ServiceA): ...  # Circular!

    Solution:
        1. Refactor to remove the circular dependency
        2. Let one side look the other up lazily through ``ContainerAware``
    """

    pass


class ContainerClosedError(BlinkDIError):
    """
    Raised when attempting to use a closed container.

    Common causes:
        - Using a container after calling ``container.close()``
        - Using a container after exiting its ``with`` block

    Solution:
        Create a new ``Container`` instead of reusing a closed one::

            with Container() as container:
                service = container.get(MyService)  # OK
            # container is now closed
    """

    pass

"""
Reflector

This module builds ObjectDefinitions from class signatures, so that classes
can be resolved without being registered first.

The Reflector performs:
- Constructor parameter analysis (names, annotations, defaults)
- Forward reference (string annotation) resolution
- Discovery of ``Inject`` markers for property injection

A parameter annotated with a class becomes a reference to that class's
identifier. Any other parameter needs a default value, which becomes a
literal. A parameter with neither is an authoring error and raises
DefinitionError immediately.
"""

import ast
import inspect
import logging
import types
import typing
from typing import Annotated, Any, Dict, List, Optional, Type, Union

from .definition import ObjectDefinition
from .exceptions import DefinitionError
from .inject import Inject

logger = logging.getLogger(__name__)

# Annotations from these modules are never treated as dependencies
_NON_SERVICE_MODULES = frozenset({'builtins', 'typing', 'abc', 'collections.abc', 'types'})


class Reflector:
    """Builds definitions by inspecting classes.

    Example::

        definition = Reflector().reflect("app.Widget", Widget)
        [ref.name for ref in definition.constructor.arguments]
        # ['logger', 'name']
    """

    def reflect(self, name: str, cls: Type) -> ObjectDefinition:
        """Build the definition for ``cls`` registered under ``name``.

        Args:
            name: The identifier the definition is stored under
            cls: The class to analyze

        Returns:
            A new ObjectDefinition with constructor and property references

        Raises:
            DefinitionError: When a parameter cannot be satisfied or the
                constructor cannot be inspected
        """
        logger.debug("Reflecting definition for %s", name)
        definition = ObjectDefinition(name, type=cls)

        if cls.__init__ is not object.__init__:
            constructor = definition.have_constructor()
            for param in self._constructor_parameters(cls):
                keyword = param.kind == inspect.Parameter.KEYWORD_ONLY
                reference = constructor.have_argument(param.name, keyword=keyword)
                dependency = self._dependency_class(param.annotation)
                if dependency is not None:
                    reference.reference_to(dependency)
                elif param.default is not inspect.Parameter.empty:
                    reference.with_value(param.default)
                else:
                    raise DefinitionError(
                        f"Unable to build definition for '{name}': parameter "
                        f"'{param.name}' of {cls.__name__}.__init__ has no class "
                        f"annotation and no default value."
                    )

        for attr_name, marker, annotation in self._inject_markers(cls):
            reference = definition.have_property(attr_name, guarded=marker.guarded)
            if marker.target is not None:
                reference.reference_to(marker.target)
                continue
            dependency = self._dependency_class(annotation)
            if dependency is None:
                raise DefinitionError(
                    f"Unable to build definition for '{name}': Inject() on "
                    f"'{cls.__name__}.{attr_name}' needs a class annotation "
                    f"or an explicit identifier."
                )
            reference.reference_to(dependency)

        return definition

    def _constructor_parameters(self, cls: Type) -> List[inspect.Parameter]:
        """Return the injectable ``__init__`` parameters with resolved annotations.

        ``self``, ``*args`` and ``**kwargs`` are skipped.
        """
        try:
            sig = inspect.signature(cls.__init__)
        except ValueError as e:
            raise DefinitionError(
                f"Cannot inspect {cls.__name__}.__init__: {e}. "
                f"This may occur with built-in types or C extension classes."
            ) from e
        except TypeError as e:
            raise DefinitionError(
                f"Cannot get signature for {cls.__name__}.__init__: {e}. "
                f"Ensure {cls.__name__} is a class with a valid constructor."
            ) from e

        resolved_hints = self._resolve_type_hints(cls.__init__)

        parameters = []
        for param_name, param in sig.parameters.items():
            if param_name == 'self':
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            annotation = resolved_hints.get(param_name, param.annotation)
            if isinstance(annotation, str):
                annotation = self._resolve_string_annotation(cls, annotation)
            parameters.append(param.replace(annotation=annotation))

        return parameters

    def _inject_markers(self, cls: Type) -> List[tuple]:
        """Collect ``(attribute, Inject, annotation)`` for every marker on the class.

        Subclass markers override base class markers of the same name.
        """
        markers: Dict[str, Inject] = {}
        for klass in reversed(cls.__mro__):
            for attr_name, value in vars(klass).items():
                if isinstance(value, Inject):
                    markers[attr_name] = value
        if not markers:
            return []

        hints = self._resolve_type_hints(cls)
        result = []
        for attr_name, marker in markers.items():
            annotation = hints.get(attr_name, inspect.Parameter.empty)
            if annotation is inspect.Parameter.empty:
                for klass in cls.__mro__:
                    raw = getattr(klass, '__annotations__', {}).get(attr_name)
                    if raw is not None:
                        annotation = raw
                        break
            if isinstance(annotation, str):
                annotation = self._resolve_string_annotation(cls, annotation)
            result.append((attr_name, marker, annotation))
        return result

    @staticmethod
    def _dependency_class(annotation: Any) -> Optional[Type]:
        """Return the class an annotation depends on, or None.

        ``Annotated[X, ...]`` and ``Optional[X]`` unwrap to ``X``. Builtins
        (``str``, ``int``, ...) and typing constructs are not dependencies.
        """
        if annotation is inspect.Parameter.empty or annotation is None:
            return None

        if typing.get_origin(annotation) is Annotated:
            annotation = typing.get_args(annotation)[0]

        if typing.get_origin(annotation) in (Union, types.UnionType):
            members = [a for a in typing.get_args(annotation) if a is not type(None)]
            if len(members) != 1:
                return None
            annotation = members[0]

        if inspect.isclass(annotation) and annotation.__module__ not in _NON_SERVICE_MODULES:
            return annotation
        return None

    @staticmethod
    def _resolve_type_hints(obj: Any) -> Dict[str, Any]:
        """Resolve type hints using typing.get_type_hints().

        Returns an empty dict when resolution fails, allowing fallback to
        per-annotation resolution.
        """
        try:
            # include_extras=True preserves Annotated[] metadata
            return typing.get_type_hints(obj, include_extras=True)
        except NameError:
            # Type not found in scope - common with local classes
            return {}
        except RecursionError:
            return {}
        except (TypeError, AttributeError):
            # PEP 604 | operator used with a type that doesn't support it
            return {}

    @staticmethod
    def _resolve_string_annotation(cls: Type, annotation: str) -> Any:
        """Attempt to resolve a string annotation in the class's module.

        This is a fallback when typing.get_type_hints() fails.

        Returns:
            The resolved type, or ``inspect.Parameter.empty`` when the
            annotation cannot be evaluated (the parameter then needs a default)
        """
        module = inspect.getmodule(cls)
        namespace: Dict[str, Any] = {}
        if module is not None:
            namespace.update(vars(module))

        # Also check class's own namespace (for nested classes)
        namespace.update(vars(cls))
        namespace.setdefault('Union', Union)
        namespace.setdefault('Optional', Optional)

        converted = Reflector._convert_union_syntax(annotation)
        try:
            return eval(converted, namespace)
        except (NameError, SyntaxError, AttributeError, TypeError):
            logger.debug(
                "Could not resolve annotation %r on %s", annotation, cls.__name__
            )
            return inspect.Parameter.empty

    @staticmethod
    def _convert_union_syntax(annotation: str) -> str:
        """Convert PEP 604 union syntax (X | Y) to Union[X, Y].

        Example::

            >>> Reflector._convert_union_syntax('Logger | None')
            'Union[Logger, None]'
        """
        if '|' not in annotation:
            return annotation

        try:
            tree = ast.parse(annotation, mode='eval')
        except SyntaxError:
            return annotation

        class UnionTransformer(ast.NodeTransformer):
            """Transform BinOp(|) nodes to Subscript(Union[...]) nodes."""

            def visit_BinOp(self, node: ast.BinOp) -> ast.AST:
                if isinstance(node.op, ast.BitOr):
                    # Flatten X | Y | Z into Union[X, Y, Z]
                    members = Reflector._collect_union_types(node)
                    return ast.Subscript(
                        value=ast.Name(id='Union', ctx=ast.Load()),
                        slice=ast.Tuple(elts=[self.visit(m) for m in members], ctx=ast.Load()),
                        ctx=ast.Load()
                    )
                self.generic_visit(node)
                return node

        new_tree = UnionTransformer().visit(tree)
        ast.fix_missing_locations(new_tree)
        return ast.unparse(new_tree.body)

    @staticmethod
    def _collect_union_types(node: ast.BinOp) -> List[ast.AST]:
        """Flatten a chain of | operators into its member nodes."""
        members: List[ast.AST] = []

        def collect(n: ast.AST) -> None:
            if isinstance(n, ast.BinOp) and isinstance(n.op, ast.BitOr):
                collect(n.left)
                collect(n.right)
            else:
                members.append(n)

        collect(node)
        return members

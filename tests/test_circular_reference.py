"""
Circular Reference Tests

Tests that dependency cycles raise instead of recursing forever.
"""

import sys
import os
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from conftest import ContainerTestCase
from fixtures import CycleA, CycleB, PropertyCycleA, PropertyCycleB, SelfReferencing
from blinkdi import CircularReferenceError, Container, identifier_of


class TestCircularReference(ContainerTestCase):

    def test_two_class_cycle(self):
        with self.assertRaises(CircularReferenceError) as ctx:
            self.container.get(CycleA)

        message = str(ctx.exception)
        self.assertIn(identifier_of(CycleA), message)
        self.assertIn(identifier_of(CycleB), message)
        self.assertIn("->", message)

    def test_self_reference(self):
        with self.assertRaises(CircularReferenceError):
            self.container.get(SelfReferencing)

    def test_factory_cycle(self):
        """Cycles through factories are detected too"""
        self.container.define("a", lambda d: d.with_factory(lambda c: c.get("b")))
        self.container.define("b", lambda d: d.with_factory(lambda c: c.get("a")))
        with self.assertRaises(CircularReferenceError) as ctx:
            self.container.get("a")
        self.assertIn("a -> b -> a", str(ctx.exception))

    def test_in_progress_set_is_cleared(self):
        """A failed build leaves no identifiers marked in progress"""
        with self.assertRaises(CircularReferenceError):
            self.container.get(CycleA)
        self.assertEqual(self.container._loading_items, {})
        self.assertNotIn(identifier_of(CycleA), self.container._loaded_items)

    def test_cycle_across_delegation(self):
        """A cycle that passes through a delegate is still detected"""
        delegate = Container()
        container = Container(delegates=[delegate])
        delegate.define("b", lambda d: d.with_factory(lambda c: container.get("a")))
        container.define("a", lambda d: d.with_factory(lambda c: c.get("b")))
        with self.assertRaises(CircularReferenceError):
            container.get("a")

    def test_property_dependency_still_cycles(self):
        """Property injection happens while the owner is still in progress"""
        self.container.extend(PropertyCycleA, lambda d: d.have_property("b").reference_to(PropertyCycleB))
        with self.assertRaises(CircularReferenceError):
            self.container.get(PropertyCycleA)

    def test_diamond_is_not_a_cycle(self):
        """Shared dependencies are not mistaken for cycles"""
        self.container.set("leaf", object())
        self.container.define("left", lambda d: d.with_factory(lambda c: c.get("leaf")))
        self.container.define("right", lambda d: d.with_factory(lambda c: c.get("leaf")))
        self.container.define("top", lambda d: d.with_factory(
            lambda c: (c.get("left"), c.get("right"))
        ))
        left, right = self.container.get("top")
        self.assertIs(left, right)


if __name__ == '__main__':
    unittest.main()

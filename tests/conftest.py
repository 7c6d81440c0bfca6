"""
Test Configuration and Utilities

Common base classes and helper functions for blinkdi tests
"""

import unittest
from typing import Type

from blinkdi import Container


class ContainerTestCase(unittest.TestCase):
    """
    Base test case class for blinkdi tests.

    Creates a fresh container before each test and closes it afterwards.
    """

    def setUp(self):
        """Create an isolated container for each test"""
        self.container = Container()

    def tearDown(self):
        """Close the container after each test"""
        self.container.close()


def create_container_with(*service_classes: Type, delegates=None) -> Container:
    """
    Create a container with explicit definitions for the given classes.

    Each class is defined with no configurator, so it is built with a
    plain ``cls()`` call.

    Example:
        >>> container = create_container_with(Logger, Cache)
    """
    container = Container(delegates=delegates)
    for cls in service_classes:
        container.define(cls)
    return container

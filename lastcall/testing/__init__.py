import unittest

from .test_configuration import ConfigurationTest
from .test_errors import ErrorsTest
from .test_lifecycle import LifecycleTest, TeardownMessageTest
from .test_memoize import MemoizeTest, SerialisedMemoizeTest, DeclarationTest
from .test_registry import MethodRegistryTest
from .test_slots import CacheSlotStoreTest
from .test_strategies import ReferenceStrategyTest, SerialisedStrategyTest


__all__ = ["ConfigurationTest", "ErrorsTest", "LifecycleTest", "TeardownMessageTest", "MemoizeTest",
           "SerialisedMemoizeTest", "DeclarationTest", "MethodRegistryTest", "CacheSlotStoreTest",
           "ReferenceStrategyTest", "SerialisedStrategyTest", "run_tests"]


def run_tests():
    unittest.main(module="lastcall.testing", argv=["lastcall.testing"], exit=False)

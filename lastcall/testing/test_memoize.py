import unittest

import numpy

from ..errors import ConfigurationError, RegistrationError, SerialisationError
from ..memoize import Memoized, memoize, clear
from ..registry import method_registry
from .test_strategies import Colour, Temperature


class Counter:
    """Component counting invocations of its memoized methods"""

    def __init__(self):
        self.calls = {}

    def count(self, name):
        self.calls[name] = self.calls.get(name, 0) + 1
        return self.calls[name]

    def calls_of(self, name):
        return self.calls.get(name, 0)


class Labels(Counter):

    @memoize
    def label(self, value):
        self.count("label")
        return "A" if value == 5 else "B"

    @memoize
    def identity(self, value):
        self.count("identity")
        return object()

    @memoize
    def total(self, *values, scale=1):
        self.count("total")
        return sum(values) * scale

    @memoize
    def fails(self, value):
        if self.count("fails") == 1:
            raise RuntimeError("First call fails")

        return value

    @memoize
    def fails_after_success(self, value):
        if self.count("fails_after_success") == 2:
            raise RuntimeError("Second call fails")

        return [value]


class MemoizeTest(unittest.TestCase):

    def setUp(self):
        self.labels = Labels()

    def test_hit_skips_recomputation(self):
        first = self.labels.identity(1)
        second = self.labels.identity(1)

        self.assertIs(first, second)
        self.assertEqual(self.labels.calls_of("identity"), 1)

    def test_argument_change_recomputes(self):
        first = self.labels.identity(1)
        second = self.labels.identity(2)

        self.assertIsNot(first, second)
        self.assertEqual(self.labels.calls_of("identity"), 2)

    def test_only_last_call_remembered(self):
        self.labels.identity(1)
        self.labels.identity(2)
        self.labels.identity(1)

        self.assertEqual(self.labels.calls_of("identity"), 3)

    def test_reference_is_identity_based(self):
        self.labels.identity({"x": 1})
        self.labels.identity({"x": 1})

        self.assertEqual(self.labels.calls_of("identity"), 2)

    def test_same_object_hits(self):
        argument = {"x": 1}

        self.labels.identity(argument)
        self.labels.identity(argument)

        self.assertEqual(self.labels.calls_of("identity"), 1)

    def test_keyword_arguments(self):
        self.assertEqual(self.labels.total(1, 2, scale=3), 9)
        self.assertEqual(self.labels.total(1, 2, scale=3), 9)
        self.assertEqual(self.labels.total(1, 2), 3)

        self.assertEqual(self.labels.calls_of("total"), 2)

    def test_no_arguments(self):
        self.assertEqual(self.labels.total(), 0)
        self.assertEqual(self.labels.total(), 0)

        self.assertEqual(self.labels.calls_of("total"), 1)

    def test_instance_isolation(self):
        other = Labels()

        self.labels.label(5)
        other.label(5)

        self.assertEqual(self.labels.calls_of("label"), 1)
        self.assertEqual(other.calls_of("label"), 1)

    def test_targeted_clear(self):
        self.labels.label(5)
        identity = self.labels.identity(1)

        self.assertEqual(clear(self.labels, "label"), 1)

        self.labels.label(5)
        self.assertIs(self.labels.identity(1), identity)
        self.assertEqual(self.labels.calls_of("label"), 2)
        self.assertEqual(self.labels.calls_of("identity"), 1)

    def test_clear_all(self):
        self.labels.label(5)
        self.labels.identity(1)

        self.assertEqual(clear(self.labels), 2)

        self.labels.label(5)
        self.labels.identity(1)
        self.assertEqual(self.labels.calls_of("label"), 2)
        self.assertEqual(self.labels.calls_of("identity"), 2)

    def test_clear_without_registry(self):
        self.assertEqual(clear(object()), 0)
        self.assertEqual(clear(Counter(), "label"), 0)

    def test_clear_without_slot(self):
        self.assertEqual(clear(self.labels, "label"), 0)
        self.assertEqual(clear(self.labels, "missing"), 0)

    def test_descriptor_clear(self):
        self.labels.label(5)

        self.assertTrue(Labels.label.clear(self.labels))
        self.assertFalse(Labels.label.clear(self.labels))

    def test_failure_does_not_poison(self):
        with self.assertRaises(RuntimeError):
            self.labels.fails(1)

        self.assertEqual(self.labels.fails(1), 1)
        self.assertEqual(self.labels.fails(1), 1)
        self.assertEqual(self.labels.calls_of("fails"), 2)

    def test_failure_keeps_prior_state(self):
        first = self.labels.fails_after_success(1)

        with self.assertRaises(RuntimeError):
            self.labels.fails_after_success(2)

        self.assertIs(self.labels.fails_after_success(1), first)
        self.assertEqual(self.labels.calls_of("fails_after_success"), 2)

    def test_teardown_scenario(self):
        self.assertEqual(self.labels.label(5), "A")
        self.assertEqual(self.labels.label(5), "A")
        self.assertEqual(self.labels.calls_of("label"), 1)

        self.assertEqual(self.labels.label(6), "B")
        self.assertEqual(self.labels.calls_of("label"), 2)

        self.labels.on_destroyed()

        self.assertEqual(self.labels.label(6), "B")
        self.assertEqual(self.labels.calls_of("label"), 3)

    def test_reentrant_call_misses(self):
        class Recursive(Counter):

            @memoize
            def depth(self, value):
                if self.count("depth") == 1:
                    self.inner_result = self.depth(value)
                    return "outer"

                return "inner"

        recursive = Recursive()

        self.assertEqual(recursive.depth(1), "outer")
        self.assertEqual(recursive.inner_result, "inner")
        self.assertEqual(recursive.depth(1), "outer")
        self.assertEqual(recursive.calls_of("depth"), 2)

    def test_invalidated_during_call(self):
        class SelfClearing(Counter):

            @memoize
            def compute(self, value):
                self.count("compute")
                clear(self)
                return value

        instance = SelfClearing()
        instance.compute(1)
        instance.compute(1)

        self.assertEqual(instance.calls_of("compute"), 2)

    def test_cache_hidden_from_instance(self):
        self.labels.label(5)

        self.assertEqual(vars(self.labels), {"calls": {"label": 1}})


class SerialisedMemoizeTest(unittest.TestCase):

    def create_view_class(self, **options):
        class View(Counter):

            @memoize(strategy="serialised", **options)
            def render(self, value):
                self.count("render")
                return object()

        return View

    def test_equal_values_hit(self):
        view = self.create_view_class()()

        first = view.render({"x": 1, "y": [1, 2]})
        second = view.render({"x": 1, "y": [1, 2]})

        self.assertIs(first, second)
        self.assertEqual(view.calls_of("render"), 1)

    def test_different_values_miss(self):
        view = self.create_view_class()()

        view.render({"x": 1})
        view.render({"x": 2})

        self.assertEqual(view.calls_of("render"), 2)

    def test_key_order_miss(self):
        view = self.create_view_class()()

        view.render({"x": 1, "y": 2})
        view.render({"y": 2, "x": 1})

        self.assertEqual(view.calls_of("render"), 2)

    def test_key_order_sorted(self):
        view = self.create_view_class(sort_keys=True)()

        view.render({"x": 1, "y": 2})
        view.render({"y": 2, "x": 1})

        self.assertEqual(view.calls_of("render"), 1)

    def test_numpy_arrays(self):
        view = self.create_view_class()()

        view.render(numpy.arange(4))
        view.render(numpy.arange(4))

        self.assertEqual(view.calls_of("render"), 1)

    def test_serialisation_failure(self):
        view = self.create_view_class()()
        values = []
        values.append(values)

        with self.assertRaises(SerialisationError):
            view.render(values)

        self.assertEqual(view.calls_of("render"), 0)

    def test_enum_members_miss(self):
        view = self.create_view_class()()

        view.render(Colour.red)
        view.render(Colour.blue)
        view.render(Colour.blue)

        self.assertEqual(view.calls_of("render"), 2)

    def test_private_state_miss(self):
        view = self.create_view_class()()

        view.render(Temperature(1))
        view.render(Temperature(500))

        self.assertEqual(view.calls_of("render"), 2)

    def test_non_string_keys_rejected(self):
        view = self.create_view_class()()
        view.render({"1": "a"})

        with self.assertRaises(SerialisationError):
            view.render({1: "a"})

        self.assertEqual(view.calls_of("render"), 1)


class DeclarationTest(unittest.TestCase):

    def test_bare_and_called_forms(self):
        class Widget:

            @memoize
            def first(self):
                pass

            @memoize()
            def second(self):
                pass

        self.assertIsInstance(Widget.first, Memoized)
        self.assertIsInstance(Widget.second, Memoized)
        self.assertEqual([d.name for d in method_registry.list(Widget)], ["first", "second"])

    def test_metadata_preserved(self):
        class Widget:

            @memoize
            def size(self):
                """Size of widget"""

        widget = Widget()

        self.assertEqual(Widget.size.__name__, "size")
        self.assertEqual(widget.size.__doc__, "Size of widget")
        self.assertIs(widget.size.__self__, widget)

    def test_descriptor_options(self):
        class Widget:

            @memoize(strategy="serialized", auto_destroy=False)
            def size(self):
                pass

        descriptor = Widget.size.descriptor

        self.assertIs(descriptor.owner, Widget)
        self.assertEqual(descriptor.name, "size")
        self.assertFalse(descriptor.options.auto_destroy)
        self.assertTrue(descriptor.slot_id.startswith("DeclarationTest.test_descriptor_options.<locals>.Widget.size"))

    def test_invalid_option(self):
        with self.assertRaises(ConfigurationError):
            memoize(strategy="deep")

    def test_not_callable(self):
        with self.assertRaises(TypeError):
            memoize(42)

    def test_static_method_rejected(self):
        with self.assertRaises(TypeError):
            memoize(staticmethod(len))

    def test_undeclared_use(self):
        def compute(self):
            pass

        memoized = memoize(compute)

        with self.assertRaises(RegistrationError):
            memoized(object())

import unittest
from unittest.mock import MagicMock

import tests.test_container_helpers as helpers
from servicebox import Container, UnknownStubKey, UnsupportedOperation
from servicebox.stub import StubOverlay


class StubTestCase(unittest.TestCase):
    def setUp(self):
        self.container = Container()
        self.container.enable_stubs()
        self.container.register("item", "item")
        self.container.register("foo", "bar")

    def tearDown(self):
        self.container.unstub()

    def test_stub(self) -> None:
        result = self.container.stub("item", "stub")

        self.assertIs(self.container, result)
        self.assertEqual("stub", self.container.resolve("item"))
        self.assertEqual("stub", self.container["item"])

    def test_other_keys_untouched(self) -> None:
        self.container.stub("item", "stub")

        self.assertEqual("bar", self.container.resolve("foo"))

    def test_unstub_key(self) -> None:
        self.container.stub("item", "stub").stub("foo", "baz")
        self.container.unstub("item")

        self.assertEqual("item", self.container.resolve("item"))
        self.assertEqual("baz", self.container.resolve("foo"))

    def test_unstub_all(self) -> None:
        self.container.stub("item", "stub").stub("foo", "baz")
        self.container.unstub()

        self.assertEqual("item", self.container["item"])
        self.assertEqual("bar", self.container["foo"])

    def test_stubbed_block(self) -> None:
        with self.container.stubbed("item", "stub") as value:
            self.assertEqual("stub", value)
            self.assertEqual("stub", self.container.resolve("item"))

        self.assertEqual("item", self.container.resolve("item"))

    def test_stubbed_block_restores_on_error(self) -> None:
        with self.assertRaises(RuntimeError):
            with self.container.stubbed("item", "stub"):
                raise RuntimeError("boom")

        self.assertEqual("item", self.container.resolve("item"))

    def test_stubbed_block_restores_previous_stub(self) -> None:
        self.container.stub("item", "outer")

        with self.container.stubbed("item", "inner"):
            self.assertEqual("inner", self.container["item"])

        self.assertEqual("outer", self.container["item"])

    def test_enum_and_string_keys(self) -> None:
        self.container.register(helpers.Color.RED, "red")
        self.container.stub(helpers.Color.RED, "stub")

        self.assertEqual("stub", self.container.resolve("red"))

    def test_missing_key(self) -> None:
        with self.assertRaises(UnknownStubKey) as ctx:
            self.container.stub("non_existing", "something")

        self.assertEqual('cannot stub "non_existing" - no such key in container', str(ctx.exception))
        self.assertIsInstance(ctx.exception, ValueError)

    def test_callable_stub_returned_verbatim(self) -> None:
        replacement = lambda: "called"  # noqa: E731
        self.container.stub("item", replacement)

        self.assertIs(replacement, self.container["item"])

    def test_stub_leaves_memoized_item_alone(self) -> None:
        counter = helpers.Counter()
        self.container.register("counter", counter, memoize=True)

        self.container.stub("counter", "stub")
        self.assertEqual("stub", self.container["counter"])
        self.assertEqual(0, counter.calls)

        self.container.unstub("counter")
        self.assertEqual(1, self.container["counter"])

    def test_default_mock(self) -> None:
        self.container.register("service", helpers.Service(), call=False)

        with self.container.stubbed("service") as mocked:
            self.assertIsInstance(mocked, MagicMock)
            self.assertIsInstance(mocked, helpers.Service)
            self.assertIs(mocked, self.container["service"])

    def test_disable_stubs(self) -> None:
        self.container.stub("item", "stub")
        self.container.disable_stubs()

        self.assertEqual("item", self.container["item"])
        with self.assertRaises(UnsupportedOperation):
            self.container.stub("item", "stub")
        self.container.enable_stubs()

    def test_dup_has_no_stubs(self) -> None:
        self.container.stub("item", "stub")

        duplicate = self.container.dup()

        self.assertEqual("item", duplicate["item"])
        with self.assertRaises(UnsupportedOperation):
            duplicate.unstub()


class StubSupportTestCase(unittest.TestCase):
    def test_stub_without_enable(self) -> None:
        container = Container().register("item", "item")

        with self.assertRaises(UnsupportedOperation):
            container.stub("item", "stub")
        with self.assertRaises(UnsupportedOperation):
            container.unstub()

    def test_enable_twice_keeps_stubs(self) -> None:
        container = Container().register("item", "item").enable_stubs()
        container.stub("item", "stub")

        container.enable_stubs()

        self.assertEqual("stub", container["item"])

    def test_overlay_not_supported(self) -> None:
        class PlainContainer(Container):
            stub_overlay_class = None

        with self.assertRaises(UnsupportedOperation):
            PlainContainer().enable_stubs()

    def test_custom_overlay(self) -> None:
        class SentinelOverlay(StubOverlay):
            def __init__(self):
                super().__init__(mocking_function=lambda value: f"mock of {value}")

        class CustomContainer(Container):
            stub_overlay_class = SentinelOverlay

        container = CustomContainer().register("item", "item").enable_stubs()
        container.stub("item")

        self.assertEqual("mock of item", container["item"])


if __name__ == "__main__":
    unittest.main()

from concurrent.futures import ThreadPoolExecutor, as_completed

import pytest

import tests.test_container_helpers as helpers
from servicebox.errors import FrozenRegistry, KeyConflict, KeyNotFound
from servicebox.item import build_item, value_item
from servicebox.registry import Registry, normalize_key


@pytest.mark.parametrize(
    ("key", "expected"),
    (("item", "item"), (helpers.Color.RED, "red"), (1, "1")),
    ids=("string", "enum", "int"),
)
def test_normalize_key(key, expected) -> None:
    assert normalize_key(key) == expected


def test_set_and_resolve() -> None:
    registry = Registry()
    item = value_item("value")

    assert registry.set("key", item) is registry
    assert registry.resolve("key") is item
    assert registry.has("key")
    assert "key" in registry
    assert len(registry) == 1


def test_set_conflict() -> None:
    registry = Registry()
    first = value_item("first")
    registry.set("key", first)

    with pytest.raises(KeyConflict):
        registry.set(helpers.Color.RED, value_item("red")).set("red", value_item("again"))

    with pytest.raises(KeyConflict):
        registry.set("key", value_item("second"))
    assert registry.resolve("key") is first


def test_resolve_missing() -> None:
    registry = Registry()
    registry.set("database", value_item(1))

    with pytest.raises(KeyNotFound) as excinfo:
        registry.resolve("databse")

    assert excinfo.value.key == "databse"
    assert excinfo.value.receiver is registry
    assert excinfo.value.suggestions == ["database"]


def test_order() -> None:
    registry = Registry()
    for key in ("b", "a", "c"):
        registry.set(key, value_item(key))

    assert registry.keys() == ["b", "a", "c"]
    assert list(registry) == ["b", "a", "c"]
    assert [key for key, _ in registry.items()] == ["b", "a", "c"]


def test_set_many_is_all_or_nothing() -> None:
    registry = Registry()
    registry.set("existing", value_item(0))

    with pytest.raises(KeyConflict):
        registry.set_many([("new", value_item(1)), ("existing", value_item(2))])
    assert registry.keys() == ["existing"]

    with pytest.raises(KeyConflict):
        registry.set_many([("dup", value_item(1)), ("dup", value_item(2))])
    assert registry.keys() == ["existing"]

    registry.set_many([("a", value_item(1)), ("b", value_item(2))])
    assert registry.keys() == ["existing", "a", "b"]


def test_replace_and_update_overwrite() -> None:
    registry = Registry()
    registry.set("a", value_item(1)).set("b", value_item(2))

    registry.replace("a", value_item(10))
    registry.update([("b", value_item(20)), ("c", value_item(30))])

    assert registry.keys() == ["a", "b", "c"]
    assert [item.resolve() for _, item in registry.items()] == [10, 20, 30]


def test_frozen() -> None:
    registry = Registry()
    registry.set("a", value_item(1))

    assert registry.freeze() is registry
    assert registry.frozen

    with pytest.raises(FrozenRegistry) as excinfo:
        registry.set("b", value_item(2))
    assert excinfo.value.key == "b"
    assert excinfo.value.receiver is registry

    with pytest.raises(FrozenRegistry):
        registry.set_many([("c", value_item(3))])
    with pytest.raises(FrozenRegistry):
        registry.replace("a", value_item(3))
    with pytest.raises(FrozenRegistry):
        registry.update([("a", value_item(3))])

    assert registry.resolve("a").resolve() == 1
    assert registry.keys() == ["a"]


def test_copy() -> None:
    registry = Registry()
    counter = helpers.Counter()
    registry.set("counter", build_item(counter, memoize=True))
    registry.resolve("counter").resolve()
    registry.freeze()

    duplicate = registry.copy()
    duplicate.set("other", value_item(1))

    assert not duplicate.frozen
    assert not registry.has("other")
    assert duplicate.resolve("counter") is not registry.resolve("counter")
    # the memoized value travels with the copy
    assert duplicate.resolve("counter").resolve() == 1
    assert counter.calls == 1


def test_concurrent_set() -> None:
    registry = Registry()
    n_keys = 100

    def register(i):
        try:
            registry.set(f"key_{i % n_keys}", value_item(i))
        except KeyConflict:
            return False
        return True

    with ThreadPoolExecutor(max_workers=10) as executor:
        futures = [executor.submit(register, i) for i in range(1000)]
        results = [future.result() for future in as_completed(futures)]

    assert results.count(True) == n_keys
    assert len(registry) == n_keys

import gc
import weakref

import pytest

from repokit.entities import Entity, describe, setter_candidates, split_accessor


@pytest.mark.parametrize(
    "name,expected",
    [
        ("get_title", ("title", "get")),
        ("getTitle", ("title", "get")),
        ("getFooBar", ("fooBar", "get")),
        ("get_created_at", ("created_at", "get")),
        ("is_active", ("active", "is")),
        ("isEnabled", ("enabled", "is")),
        ("get_URL", ("uRL", "get")),
        ("issue", None),
        ("getter", None),
        ("get", None),
        ("is_", None),
        ("title", None),
    ],
)
def test_split_accessor(name, expected):
    assert split_accessor(name) == expected


def test_setter_candidates_priority():
    assert setter_candidates("active") == (
        "set_active",
        "setActive",
        "set_is_active",
        "setIsActive",
    )
    assert setter_candidates("fooBar")[:2] == ("set_fooBar", "setFooBar")


class Widget(Entity):
    def __init__(self):
        super().__init__()
        self._size = 1
        self._visible = True

    def get_size(self):
        return self._size

    def set_size(self, value):
        self._size = value

    def is_visible(self):
        return self._visible

    def get_label(self, fmt="{}"):
        return fmt.format(self._size)

    def get_scaled(self, factor):
        return self._size * factor

    @property
    def get_cached(self):
        return "property"

    @staticmethod
    def get_kind():
        return "widget"

    @classmethod
    def get_registry(cls):
        return {}

    def _get_secret(self):
        return "hidden"

    def issue(self):
        return "not an accessor"


class SmallWidget(Widget):
    get_label = None

    def get_size(self):
        return 0

    def get_colour(self):
        return "red"


def test_describe_collects_only_zero_argument_public_methods():
    keys = describe(Widget).keys()
    assert set(keys) == {"id", "created_at", "updated_at", "size", "visible", "label"}


def test_describe_orders_base_fields_first():
    keys = describe(Widget).keys()
    assert keys[:3] == ("id", "created_at", "updated_at")


def test_describe_records_accessor_kind():
    kinds = {field.key: field.kind for field in describe(Widget)}
    assert kinds["visible"] == "is"
    assert kinds["size"] == "get"


def test_subclass_override_and_shadowing():
    table = describe(SmallWidget)
    assert "label" not in table.keys()
    assert "colour" in table.keys()
    assert SmallWidget().to_map()["size"] == 0


def test_describe_is_cached_per_class():
    assert describe(Widget) is describe(Widget)
    assert describe(Widget) is not describe(SmallWidget)


def test_resolve_setter():
    table = describe(Widget)
    assert table.resolve_setter("size") == "set_size"
    assert table.resolve_setter("visible") is None
    assert table.resolve_setter("id") == "set_id"


def test_to_map_invokes_accessor_with_defaults():
    assert Widget().to_map()["label"] == "1"


class Gadget(Entity):
    def __init__(self):
        super().__init__()
        self._mode = None
        self.resets = 0

    def get_mode(self):
        return self._mode

    def set_mode(self, value=None):
        self._mode = value

    def set_reset(self):
        self.resets += 1

    def set_range(self, low, high):
        self._mode = (low, high)


def test_mutators_take_exactly_one_value():
    table = describe(Gadget)
    assert "set_mode" in table.setters
    assert "set_reset" not in table.setters
    assert "set_range" not in table.setters


def test_hydration_skips_setters_without_a_value_parameter():
    gadget = Gadget().from_map({"mode": "fast", "reset": True, "range": 3})
    assert gadget.get_mode() == "fast"
    assert gadget.resets == 0


def test_describe_does_not_keep_classes_alive():
    class Temporary(Entity):
        def get_name(self):
            return "temp"

    table = describe(Temporary)
    assert "name" in table.keys()
    ref = weakref.ref(Temporary)
    del Temporary
    gc.collect()
    assert ref() is None

import re

import pytest

from keystone.component import Component
from keystone.domain import ConstructResult, LifecycleStage
from keystone.errors import DependencyError, DependencyValidationError
from keystone.manifest import requires
from keystone.mixer import Mixer


def record(instance, event):
    instance.__dict__.setdefault("events", []).append(event)


class Base(Component):
    def construct(self, name="base"):
        record(self, f"Base.construct({name})")
        self.name = name

    def ready(self):
        record(self, "Base.ready")


class Middle(Base):
    def construct(self, db):
        record(self, f"Middle.construct({db})")
        self.db = db


class Leaf(Middle):
    def construct(self, size=10):
        record(self, f"Leaf.construct({size})")
        self.size = size

    def ready(self):
        record(self, "Leaf.ready")


class Halting(Middle):
    def construct(self):
        record(self, "Halting.construct")
        return ConstructResult.HALT_ANCESTORS


class Supplying(Middle):
    def construct(self):
        return {"db": "supplied-db", "extra": True}


class Tracking:
    def before_construct(self):
        record(self, "Tracking.before_construct")

    def construct(self, tracker=None):
        record(self, f"Tracking.construct({tracker})")

    def after_construct(self):
        record(self, "Tracking.after_construct")

    def before_ready(self):
        record(self, "Tracking.before_ready")

    def after_ready(self):
        record(self, "Tracking.after_ready")


class Timing:
    def before_construct(self):
        record(self, "Timing.before_construct")

    def after_ready(self):
        record(self, "Timing.after_ready")


class Validated(Component):
    @requires("db", "size")
    def construct(self, db, size):
        self.db = self.require("db", instance_of=dict)
        self.size = self.require("size", expected_type=int, allow_null=True)


def test_construct_methods_run_from_most_derived_to_eldest():
    leaf = Leaf({"db": "main", "size": 3, "name": "leaf"})

    assert leaf.events[:3] == ["Leaf.construct(3)", "Middle.construct(main)", "Base.construct(leaf)"]


def test_construct_receives_signature_defaults_which_are_stored():
    leaf = Leaf({"db": "main"})

    assert leaf.size == 10
    assert leaf.name == "base"
    assert leaf.get_config("size") == 10


def test_missing_inputs_without_defaults_are_none():
    assert Leaf().db is None


def test_halt_ancestors_skips_remaining_construct_methods():
    halting = Halting({"db": "main"})

    assert halting.events == ["Halting.construct", "Base.ready"]
    assert not hasattr(halting, "db")


def test_returning_false_skips_parent_construct_methods():
    class ReturnsFalse(Middle):
        def construct(self):
            record(self, "ReturnsFalse.construct")
            return False

    returns_false = ReturnsFalse({"db": "main"})

    assert returns_false.events == ["ReturnsFalse.construct", "Base.ready"]
    assert not hasattr(returns_false, "db")


@pytest.mark.parametrize("result", [0, None, "", ConstructResult.CONTINUE])
def test_other_falsy_results_continue(result):
    class Continuing(Middle):
        def construct(self):
            return result

    assert Continuing({"db": "main"}).db == "main"


def test_returned_mapping_is_merged_into_the_config():
    supplying = Supplying()

    assert supplying.db == "supplied-db"
    assert supplying.get_config("extra") is True


def test_ready_runs_once_and_only_the_most_derived_override():
    leaf = Leaf({"db": "main"})

    assert leaf.events.count("Leaf.ready") == 1
    assert "Base.ready" not in leaf.events


def test_mixin_hooks_run_at_each_stage():
    Composed = Mixer().compose(Leaf, Tracking, Timing)
    instance = Composed({"db": "main", "tracker": "t"})

    assert instance.events == [
        "Tracking.before_construct",
        "Timing.before_construct",
        "Leaf.construct(10)",
        "Middle.construct(main)",
        "Base.construct(base)",
        "Tracking.construct(t)",
        "Tracking.after_construct",
        "Tracking.before_ready",
        "Leaf.ready",
        "Tracking.after_ready",
        "Timing.after_ready",
    ]


def test_halting_also_skips_mixin_construct_methods():
    Composed = Mixer().compose(Halting, Tracking)

    assert "Tracking.construct(None)" not in Composed().events


def test_lifecycle_ends_constructed():
    stages = []

    class Watching(Component):
        def construct(self):
            stages.append(self.framework.stage)

        def ready(self):
            stages.append(self.framework.stage)

    watching = Watching()

    assert stages == [LifecycleStage.CONSTRUCT, LifecycleStage.READY]
    assert watching.framework.stage is LifecycleStage.CONSTRUCTED


def test_lifecycle_transitions_are_logged(caplog):
    caplog.set_level("DEBUG", logger="keystone.component")
    Component({"__framework__": {"class_name": "Test.abstract.Thing"}})

    assert "Test.abstract.Thing entering BEFORE_CONSTRUCT" in caplog.text
    assert "Test.abstract.Thing entering CONSTRUCTED" in caplog.text


def test_lifecycle_exceptions_propagate_unchanged():
    class Failing(Component):
        def construct(self):
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        Failing()


def test_framework_key_is_removed_from_the_config():
    parent = object()
    leaf = Leaf({"db": "main", "__framework__": {"class_name": "Test.leaf.Leaf", "parent": parent}})

    assert "__framework__" not in leaf.config
    assert leaf.class_name == "Test.leaf.Leaf"
    assert leaf.parent is parent
    assert leaf.runtime is None
    assert repr(leaf) == "<Test.leaf.Leaf>"


def test_class_name_falls_back_to_the_module_path():
    assert Leaf({"db": "main"}).class_name == f"{__name__}.Leaf"


def test_config_is_copied():
    config = {"db": "main"}
    Supplying(config)

    assert config == {"db": "main"}


def test_config_helpers():
    leaf = Leaf({"db": "main"})
    leaf.set_config("colour", "red")
    leaf.apply_config({"shape": "round"})

    assert leaf.get_config("colour") == "red"
    assert leaf.get_config("shape") == "round"

    leaf.configure({"only": 1})
    assert dict(leaf.config) == {"only": 1}


def test_class_dependencies():
    Composed = Mixer().compose(Leaf, Tracking)

    assert Leaf.class_dependencies() == ("size", "db", "name")
    assert Composed.class_dependencies() == ("size", "db", "name", "tracker")


def test_mixins_property_inspects_the_instance():
    Composed = Mixer().compose(Leaf, Tracking)
    instance = Composed({"db": "main"})

    assert list(instance.mixins.all.values()) == [Tracking]


def test_require_returns_valid_values():
    validated = Validated({"db": {"host": "x"}, "size": None})

    assert validated.db == {"host": "x"}
    assert validated.size is None


def test_require_reports_missing_dependencies():
    expected = (
        "Validation failure in Test.service.Validated::construct(). The class dependency "
        "(construct parameter), 'db', failed validation. Reason: A value is required but was not provided."
    )

    with pytest.raises(DependencyValidationError, match=re.escape(expected)) as caught:
        Validated({"__framework__": {"class_name": "Test.service.Validated"}})

    assert caught.value.parameter_name == "db"
    assert caught.value.member == "construct"
    assert caught.value.class_name == "Test.service.Validated"


def test_require_reports_wrong_instances():
    with pytest.raises(DependencyValidationError, match="expected to be an instance of 'builtins.dict'"):
        Validated({"db": ["not", "a", "dict"]})


def test_require_reports_wrong_types():
    with pytest.raises(DependencyValidationError, match="'int' was expected, but 'str' was provided"):
        Validated({"db": {}, "size": "large"})


def test_require_names_the_mixin():
    class NeedsClock:
        def construct(self, clock):
            self.require("clock", from_mixin="Test.mixin.NeedsClock")

    Composed = Mixer().compose(Component, NeedsClock)

    with pytest.raises(DependencyValidationError, match=r"Test\.mixin\.NeedsClock::construct\(\) \(mixed into"):
        Composed()


def test_require_checks_method_parameters():
    class Greeter(Component):
        def greet(self, name=None):
            return self.require("name", name)

    with pytest.raises(DependencyValidationError, match=r"Greeter::greet\(\)\. The method parameter, 'name',"):
        Greeter().greet()


def test_require_with_identifier_needs_a_runtime():
    class Strict(Component):
        def construct(self, db):
            self.require("db", instance_of="Test.db.Database")

    with pytest.raises(DependencyError, match="not created by a runtime"):
        Strict({"db": object()})

import pytest

from keystone.errors import DependencyError
from keystone.manifest import (
    class_dependencies,
    construct_methods,
    dependencies_of,
    parameter_defaults,
    requires,
)
from keystone.mixer import Mixer


class Parent:
    def construct(self, db, cache=None):
        pass


class Child(Parent):
    @requires("logger", "db")
    def construct(self, logger, db, **others):
        pass


class Grandchild(Child):
    pass


class Auditing:
    def construct(self, audit_log, *args, **kwargs):
        pass


def test_manifest_is_derived_from_the_signature():
    def construct(self, db, *args, cache=None, **kwargs):
        pass

    assert dependencies_of(construct) == ("db", "cache")


def test_derived_manifest_is_cached_on_the_function():
    def construct(self, db):
        pass

    dependencies_of(construct)

    assert construct.__requires__ == ("db",)


def test_declared_manifest_wins_over_the_signature():
    assert dependencies_of(Child.construct) == ("logger", "db")


def test_declared_names_must_be_identifiers():
    with pytest.raises(DependencyError, match="'not a name'"):
        requires("not a name")


def test_positional_only_parameters_are_rejected():
    def construct(self, db, /):
        pass

    with pytest.raises(DependencyError, match="positional-only"):
        dependencies_of(construct)


def test_parameter_defaults():
    def construct(self, db, cache=None, ttl=30):
        pass

    assert parameter_defaults(construct) == {"cache": None, "ttl": 30}


def test_construct_methods_run_from_most_derived_class():
    assert construct_methods(Grandchild) == [Child.construct, Parent.construct]


def test_mixin_construct_methods_follow_the_class_hierarchy():
    Composed = Mixer().compose(Child, Auditing)

    assert construct_methods(Composed) == [Child.construct, Parent.construct, Auditing.construct]


def test_class_dependencies_is_an_ordered_union():
    Composed = Mixer().compose(Grandchild, Auditing)

    assert class_dependencies(Composed) == ("logger", "db", "cache", "audit_log")

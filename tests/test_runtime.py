import pytest

from keystone.builders import make_runtime
from keystone.component import Component
from keystone.container import Container
from keystone.errors import DependencyValidationError, InstantiationError, UnknownDependencyError
from keystone.instantiation import ClassLoader
from keystone.mixins.parenting import Parenting
from keystone.runtime import BUILTIN_CLASSES, Runtime

USERS = """
from keystone.component import Component


class Users(Component):
    def construct(self, db, page_size=25):
        self.db = db
        self.page_size = page_size
"""

DATABASE = """
class Database:
    def __init__(self, config=None):
        self.config = config
"""

REPOSITORY = """
from keystone.component import Component


class Repository(Component):
    def construct(self, db):
        self.db = self.require("db", instance_of="App.data.Database")
"""


class Database:
    pass


@pytest.fixture
def runtime(class_root, write_class) -> Runtime:
    write_class("service/Users.py", USERS)
    write_class("data/Database.py", DATABASE)
    write_class("data/Repository.py", REPOSITORY)
    return make_runtime(
        namespaces={"App": class_root},
        values={"page_size": 50},
        singletons={"db": lambda c: Database()},
    )


@pytest.mark.parametrize("identifier", list(BUILTIN_CLASSES))
def test_builtin_classes_are_defined(identifier):
    runtime = Runtime()

    assert runtime.cls(identifier) is BUILTIN_CLASSES[identifier]


def test_builtin_container_values():
    runtime = Runtime()

    assert runtime.dep("runtime") is runtime
    assert runtime.dep("container") is runtime.container
    assert isinstance(runtime.dep("class_loader"), ClassLoader)
    assert runtime.deps(["container", "missing"]) == {"container": runtime.container}


def test_runtimes_are_independent():
    first = make_runtime(values={"region": "eu"})
    second = Runtime()

    assert first.dep("region") == "eu"
    with pytest.raises(UnknownDependencyError):
        second.dep("region")
    assert first.dep("container") is not second.dep("container")


def test_components_are_loaded_and_injected(runtime):
    users = runtime.inst("App.service.Users")

    assert users.class_name == "App.service.Users"
    assert users.runtime is runtime
    assert isinstance(users.db, Database)
    assert users.page_size == 50


def test_singletons_are_shared_between_instances(runtime):
    assert runtime.inst("App.service.Users").db is runtime.inst("App.service.Users").db


def test_require_resolves_identifiers_through_the_runtime(runtime):
    Database = runtime.cls("App.data.Database")

    repository = runtime.inst("App.data.Repository", {"db": Database()})
    assert isinstance(repository.db, Database)

    with pytest.raises(DependencyValidationError, match="instance of 'App.data.Database'"):
        runtime.inst("App.data.Repository")


def test_mix_by_identifier(runtime):
    Users = runtime.mix("App.service.Users", "Keystone.logging.mixin.Loggable")
    users = runtime.inst(Users)

    assert users.logger.name == users.class_name
    assert users.mixins.names == ("Keystone.logging.mixin.Loggable",)


def test_spawned_children_know_their_parent(runtime):
    Users = runtime.mix("App.service.Users", "Keystone.asset.mixin.Parenting")
    parent = runtime.inst(Users)

    child = parent.spawn("App.service.Users", {"page_size": 5})

    assert parent.class_loader is runtime.dep("class_loader")
    assert child.parent is parent
    assert child.class_name == "App.service.Users"
    assert child.page_size == 5


def test_parenting_requires_a_class_loader():
    Spawner = Runtime().mix(Component, Parenting)

    with pytest.raises(DependencyValidationError, match=r"Keystone\.asset\.mixin\.Parenting::construct\(\)"):
        Spawner()


def test_clear_caches_reloads_class_files(runtime, write_class):
    first = runtime.cls("App.data.Database")
    write_class("data/Database.py", DATABASE + "\n\nDatabase.reloaded = True\n")

    runtime.clear_caches()
    second = runtime.cls("App.data.Database")

    assert second is not first
    assert second.reloaded
    assert runtime.cls("Keystone.asset.ioc.Container") is Container


def test_clear_caches_can_keep_classes(runtime):
    first = runtime.cls("App.data.Database")
    runtime.clear_caches(classes=False)

    assert runtime.cls("App.data.Database") is first


def test_make_runtime_values_override_builtins():
    loader = object()
    runtime = make_runtime(values={"class_loader": loader})

    assert runtime.dep("class_loader") is loader


def test_make_runtime_rejects_non_callable_singletons():
    with pytest.raises(TypeError):
        make_runtime(singletons={"db": "not a factory"})


def test_builtin_container_can_be_instantiated():
    runtime = Runtime()
    container = runtime.inst("Keystone.asset.ioc.Container")

    assert isinstance(container, Container)
    assert container is not runtime.container
    assert container.names == ()


def test_builtin_class_loader_cannot_be_instantiated_from_config():
    with pytest.raises(InstantiationError, match="'Keystone.asset.ClassLoader'"):
        Runtime().inst("Keystone.asset.ClassLoader")


def test_mixed_builtin_keeps_the_base_identifier():
    runtime = Runtime()
    Audited = runtime.mix("Keystone.abstract.Component", "Keystone.logging.mixin.Loggable")
    audited = runtime.inst(Audited)

    assert audited.class_name == "Keystone.abstract.Component"
    assert audited.logger.name == "Keystone.abstract.Component"

"""Keystone class-loading, mixin composition and dependency injection framework.

Keystone resolves dotted class identifiers such as ``App.widgets.Button`` to
classes loaded from files under registered namespace roots, builds new classes
by copying the members of mixins onto a subclass of a base class, and creates
instances whose construction inputs are filled in from an inversion-of-control
container. Every instance passes through a fixed, staged construction protocol
in which each level of the class hierarchy, and every mixin, takes part.

Key Features:
    - Longest-prefix namespace resolution with file-based class loading
    - Static class definitions alongside file lookup
    - Mixin composition with composition hooks and reflection over the mixin history
    - Explicit dependency manifests, derived from signatures when not declared
    - Singleton and value container with automatic injection of missing inputs
    - Staged construction: before_construct, construct, after_construct,
      before_ready, ready, after_ready

Basic Usage:
    >>> from keystone.builders import make_runtime
    >>>
    >>> runtime = make_runtime(
    ...     namespaces={"App": "/srv/app/lib"},
    ...     singletons={"db": lambda container: Database()},
    ... )
    >>>
    >>> Users = runtime.mix("App.service.Users", "Keystone.logging.mixin.Loggable")
    >>> users = runtime.inst(Users)   # `db` is injected into Users.construct

The framework consists of several core modules:
    - namespaces: Namespace prefix registration and resolution
    - class_registry: Class loading, tagging and caching by identifier
    - mixer: Mixin composition
    - reflection: Inspection of the mixins applied to a class
    - manifest: Dependency manifests of construct methods
    - container: Singleton and value container
    - instantiation: Instantiation with dependency injection
    - component: The Component base class and its construction protocol
    - runtime: The object owning one of each registry
    - builders: High-level runtime construction
    - mixins: Stock mixins (Parenting, Configurable, Loggable)
    - domain: Core domain models
    - errors: Framework-specific exceptions
"""

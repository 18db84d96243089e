__all__ = [
    "KeystoneError",
    "ResolutionError",
    "NamespaceNotFoundError",
    "ClassNotFoundError",
    "DependencyError",
    "UnknownDependencyError",
    "CompositionError",
    "DependencyValidationError",
    "InvalidIdentifierError",
    "InstantiationError",
]


class KeystoneError(Exception):
    """Base class for every error raised by the framework."""

    pass


class ResolutionError(KeystoneError):
    """Raised when a name (namespace, class or dependency) cannot be resolved."""

    pass


class NamespaceNotFoundError(ResolutionError):
    """Raised when no registered namespace prefix matches a class identifier."""

    def __init__(self, identifier: str):
        super().__init__(
            f"No registered namespaces were matched for the requested class '{identifier}'"
        )
        self.identifier = identifier


class ClassNotFoundError(ResolutionError):
    """Raised when a class identifier resolves to a location that does not define it."""

    def __init__(self, identifier: str, path=None, reason: str = None):
        message = f"Could not resolve the class definition for '{identifier}'"
        if path is not None:
            message += f"; it was not found at the resolved path '{path}'"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.identifier = identifier
        self.path = path


class DependencyError(KeystoneError):
    """Raised when a component's dependency cannot be resolved or is misdeclared."""

    pass


class UnknownDependencyError(ResolutionError, DependencyError):
    """Raised when the container is asked for a name it does not hold."""

    def __init__(self, name: str):
        super().__init__(f"Attempted to resolve an unknown class dependency ('{name}')")
        self.name = name


class CompositionError(KeystoneError):
    """Raised when a base class or mixin cannot be composed."""

    pass


class DependencyValidationError(KeystoneError):
    """Raised when a required construction input is missing or has the wrong type.

    Attributes:
        parameter_name: The dependency or parameter that failed validation.
        member: The method that asked for the value.
        class_name: The full name of the class the method belongs to.
    """

    def __init__(self, message: str, parameter_name: str, member: str, class_name: str):
        super().__init__(message)
        self.parameter_name = parameter_name
        self.member = member
        self.class_name = class_name


class InvalidIdentifierError(KeystoneError, ValueError):
    """Raised when a string does not follow the class identifier syntax."""

    pass


class InstantiationError(KeystoneError):
    """Raised when a resolved class cannot be called with the configuration it was given."""

    def __init__(self, class_name: str, reason: str):
        super().__init__(f"Unable to instantiate '{class_name}': {reason}")
        self.class_name = class_name

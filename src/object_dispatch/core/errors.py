"""
Dispatch errors

Exceptions raised by the object model.

An unresolved member name is NOT an error: the dispatcher returns the
MISSING sentinel instead. These exceptions cover malformed definitions,
field arity, configuration, and the opt-in `expect_member` helper.
"""


class DispatchError(Exception):
    """Base exception for object model errors"""
    pass


class FieldDefinitionError(DispatchError):
    """Raised when a field initializer entry is malformed"""
    pass


class FieldArityError(DispatchError):
    """Raised when a field receives more than one value in a single dispatch"""
    pass


class MethodDefinitionError(DispatchError):
    """Raised when a method can't receive the instance as its first argument"""
    pass


class MemberNotFoundError(DispatchError):
    """Raised by expect_member when a token resolves to neither field nor method"""

    def __init__(self, token):
        super().__init__(f"Member not found: {token!r}")
        self.token = token


class ClassNotFoundError(DispatchError):
    """Raised when the runtime has no method table for a class id"""
    pass


class ConfigError(DispatchError):
    """Raised when a configuration value is invalid"""
    pass


class ClassConflictError(DispatchError):
    """Raised when two different sources claim the same class id"""
    pass

import enum

from rest_framework import permissions


class Decision(enum.Enum):
    ALLOW = 'allow'
    DENY = 'deny'


class Capability:
    """
    Permission to perform one operation, expressed as the roles allowed to do it.

    ``check`` returns an explicit Decision instead of a bare boolean so views
    and tests can reason about the outcome.
    """

    def __init__(self, *roles, message=None):
        self.roles = frozenset(roles)
        self.message = message or 'Forbidden for role'

    def check(self, user):
        if user is None or not user.is_authenticated:
            return Decision.DENY
        if getattr(user, 'role', None) in self.roles:
            return Decision.ALLOW
        return Decision.DENY

    def __repr__(self):
        return f"Capability({', '.join(sorted(self.roles))})"


def allow(*roles, message=None):
    return Capability(*roles, message=message)


class HasCapability(permissions.BasePermission):
    """
    Resolve the capability a view declares for the current operation.

    Views list their own capabilities in ``capabilities``, keyed by viewset
    action (``list``, ``create``, ``summary``...) or, for plain API views, by
    lower-case HTTP method. Operations without a declared capability are
    denied.
    """

    message = 'Forbidden for role'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        key = getattr(view, 'action', None) or request.method.lower()
        if key == 'partial_update':
            key = 'update'
        if request.method == 'OPTIONS' and key == 'metadata':
            return True

        capability = getattr(view, 'capabilities', {}).get(key)
        if capability is None:
            return False

        if capability.check(request.user) is Decision.ALLOW:
            return True
        self.message = capability.message
        return False

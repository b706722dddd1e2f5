from typing import FrozenSet, Iterable, Protocol

from website_admin.domain.permissions import permissions_for


class PermissionOracle(Protocol):
    def can(self, capability: str) -> bool:
        ...


class StaticPermissions:
    """A fixed capability set, typically taken from the login response."""

    def __init__(self, capabilities: Iterable[str]):
        self._capabilities: FrozenSet[str] = frozenset(capabilities)

    def can(self, capability: str) -> bool:
        return capability in self._capabilities

    @classmethod
    def from_role(cls, role: str, extra: Iterable[str] = ()) -> "StaticPermissions":
        return cls(permissions_for(role, list(extra)))

    def __repr__(self):
        return f"StaticPermissions({sorted(self._capabilities)!r})"

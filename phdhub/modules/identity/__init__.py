"""Identity provider collaborator: user directory lookups."""

from .directory import IdentityDirectory, IdentityProfile, identity_directory

__all__ = ["IdentityDirectory", "IdentityProfile", "identity_directory"]

"""
Name Resolver
Turns partially filled identity metadata into a display name
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence

from config import policy
from tools.identity_provider import Identity


@dataclass
class ResolvedName:
    """Display identity of a patient"""
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "email": self.email
        }


Resolver = Callable[[Identity], Optional[ResolvedName]]

_EMAIL_NAME_SEPARATORS = re.compile(r"[._-]")


def id_prefix(user_id: Any) -> str:
    return str(user_id)[:policy.PLACEHOLDER_ID_PREFIX_LENGTH]


def placeholder_identity(user_id: Any) -> Identity:
    """Stand-in identity for a user the provider could not return"""
    prefix = id_prefix(user_id)
    return Identity(
        id=str(user_id),
        email=None,
        user_metadata={
            "first_name": "Patient",
            "last_name": prefix,
            "full_name": f"Patient {prefix}"
        }
    )


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _capitalize(word: str) -> str:
    # Only the first letter; the rest keeps its case
    return word[:1].upper() + word[1:]


def resolve_from_first_last(identity: Identity) -> Optional[ResolvedName]:
    metadata = identity.user_metadata or {}
    first = _text(metadata.get("first_name"))
    last = _text(metadata.get("last_name"))
    if not (first and last):
        return None
    return ResolvedName(first, last, f"{first} {last}", identity.email)


def resolve_from_full_name(identity: Identity) -> Optional[ResolvedName]:
    full_name = _text((identity.user_metadata or {}).get("full_name"))
    if not full_name:
        return None
    parts = full_name.split()
    return ResolvedName(parts[0], " ".join(parts[1:]), full_name, identity.email)


def resolve_from_email(identity: Identity) -> Optional[ResolvedName]:
    email = _text(identity.email)
    if "@" not in email:
        return None

    local_part = email.split("@")[0]
    parts = [p for p in _EMAIL_NAME_SEPARATORS.split(local_part) if p]
    if not parts:
        return None

    if len(parts) >= 2:
        first, last = _capitalize(parts[0]), _capitalize(parts[1])
        return ResolvedName(first, last, f"{first} {last}", email)

    first = _capitalize(parts[0])
    return ResolvedName(first, "", first, email)


def resolve_placeholder(identity: Identity) -> ResolvedName:
    prefix = id_prefix(identity.id)
    return ResolvedName("Patient", prefix, f"Patient {prefix}", identity.email)


DEFAULT_RESOLVERS: Sequence[Resolver] = (
    resolve_from_first_last,
    resolve_from_full_name,
    resolve_from_email,
    resolve_placeholder,
)


class NameResolver:
    """Runs resolver strategies in order and keeps the first answer"""

    def __init__(self, resolvers: Sequence[Resolver] = DEFAULT_RESOLVERS):
        self.resolvers = tuple(resolvers)

    def resolve(self, identity: Identity) -> ResolvedName:
        for resolver in self.resolvers:
            resolved = resolver(identity)
            if resolved is not None:
                return resolved
        return resolve_placeholder(identity)


name_resolver = NameResolver()

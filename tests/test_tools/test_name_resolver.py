"""
Tests for Name Resolver
Tests the display name fallback chain
"""

import pytest

from tools.identity_provider import Identity
from tools.name_resolver import NameResolver, name_resolver, placeholder_identity


USER_ID = "3f2a9c41-0b7d-4e55-9a1e-2c6f0d8b7e10"


class TestNameResolver:
    """Tests for resolution order and fallbacks"""

    @pytest.mark.unit
    def test_first_and_last_name(self):
        identity = Identity(USER_ID, "jd@example.com", {"first_name": "Jane", "last_name": "Doe"})

        resolved = name_resolver.resolve(identity)

        assert (resolved.first_name, resolved.last_name, resolved.full_name) == ("Jane", "Doe", "Jane Doe")
        assert resolved.email == "jd@example.com"

    @pytest.mark.unit
    def test_full_name_split_on_whitespace(self):
        identity = Identity(USER_ID, None, {"full_name": "Mary Ann  Smith"})

        resolved = name_resolver.resolve(identity)

        assert resolved.first_name == "Mary"
        assert resolved.last_name == "Ann Smith"
        assert resolved.full_name == "Mary Ann  Smith"

    @pytest.mark.unit
    def test_first_name_only_falls_through(self):
        identity = Identity(USER_ID, "sam_lee@example.com", {"first_name": "Sam"})

        resolved = name_resolver.resolve(identity)

        assert resolved.full_name == "Sam Lee"

    @pytest.mark.unit
    @pytest.mark.parametrize("email,first,last,full", [
        ("jane.doe@example.com", "Jane", "Doe", "Jane Doe"),
        ("sam_lee@example.com", "Sam", "Lee", "Sam Lee"),
        ("mary-jo@example.com", "Mary", "Jo", "Mary Jo"),
        ("madonna@example.com", "Madonna", "", "Madonna"),
        ("mcDONALD.x@example.com", "McDONALD", "X", "McDONALD X"),
    ])
    def test_email_local_part(self, email, first, last, full):
        resolved = name_resolver.resolve(Identity(USER_ID, email, {}))

        assert (resolved.first_name, resolved.last_name, resolved.full_name) == (first, last, full)

    @pytest.mark.unit
    def test_placeholder_when_nothing_known(self):
        resolved = name_resolver.resolve(Identity(USER_ID, None, {}))

        assert resolved.first_name == "Patient"
        assert resolved.last_name == "3f2a9c41"
        assert resolved.full_name == "Patient 3f2a9c41"

    @pytest.mark.unit
    def test_placeholder_identity_resolves_to_placeholder_name(self):
        resolved = name_resolver.resolve(placeholder_identity(USER_ID))

        assert resolved.full_name == "Patient 3f2a9c41"
        assert resolved.email is None

    @pytest.mark.unit
    def test_custom_chain(self):
        resolver = NameResolver(resolvers=[lambda identity: None])

        assert resolver.resolve(Identity(USER_ID, None, {})).full_name == "Patient 3f2a9c41"

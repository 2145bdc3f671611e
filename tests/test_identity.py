"""
Tests for identity key resolution.
"""
import pytest

from api.services.identity import is_blank_name, resolve_identity_key

pytestmark = pytest.mark.unit


class TestResolveIdentityKey:
    """Display name -> storage key."""

    def test_lowercases_and_deletes_non_alphanumerics(self):
        assert resolve_identity_key("Jane Doe") == "janedoe"

    def test_variants_collapse_to_one_key(self):
        """Case, spaces and punctuation are all deleted."""
        keys = {
            resolve_identity_key(name)
            for name in ["Jane Doe", "jane-doe", "JANE_DOE", "  jane.doe  ", "Jane  Doe!"]
        }
        assert keys == {"janedoe"}

    def test_digits_survive(self):
        assert resolve_identity_key("Pilot 42") == "pilot42"

    def test_non_ascii_letters_are_deleted(self):
        assert resolve_identity_key("José Núñez") == "josnez"

    def test_deterministic(self):
        assert resolve_identity_key("Amelia Earhart") == resolve_identity_key("Amelia Earhart")

    def test_idempotent_on_keys(self):
        key = resolve_identity_key("Chuck Yeager")
        assert resolve_identity_key(key) == key

    def test_empty_string_is_total(self):
        assert resolve_identity_key("") == ""
        assert resolve_identity_key("!!! ---") == ""

    def test_no_path_separators_in_key(self):
        assert resolve_identity_key("../../etc/passwd") == "etcpasswd"


class TestIsBlankName:
    """Guard used by routes before resolving."""

    @pytest.mark.parametrize("name", [None, "", "   ", "\t\n"])
    def test_blank(self, name):
        assert is_blank_name(name) is True

    def test_not_blank(self):
        assert is_blank_name("Jane") is False

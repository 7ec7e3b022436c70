"""Unit tests for temporary passwords and identity provisioning."""

import pytest
from fastapi_users.password import PasswordHelper

from app.components.assignments.errors import IdentityProvisioningError
from app.components.assignments.identity import (
    DIGITS,
    LOWERCASE,
    SYMBOLS,
    UPPERCASE,
    LocalIdentityProvider,
    generate_temporary_password,
    provision_identities,
)
from app.models.profile import Profile
from app.models.user import User
from tests.conftest import create_profile


class RecordingProvider:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.created = []
        self.linked = []
        self.discarded = 0
        self._next_id = 100

    def create_user(self, *, email, password, metadata):
        if email in self.fail_for:
            raise IdentityProvisioningError(f"refused {email}")
        self.created.append((email, password, metadata))
        self._next_id += 1
        return self._next_id

    def link_profile(self, profile, identity_id):
        profile.auth_user_id = identity_id
        self.linked.append((profile.id, identity_id))

    def discard(self):
        self.discarded += 1


def _profile(profile_id, email, **kwargs):
    return Profile(id=profile_id, email=email, **kwargs)


class TestGenerateTemporaryPassword:

    def test_length_and_character_classes(self):
        for _ in range(50):
            password = generate_temporary_password(12)
            assert len(password) == 12
            assert any(c in UPPERCASE for c in password)
            assert any(c in LOWERCASE for c in password)
            assert any(c in DIGITS for c in password)
            assert any(c in SYMBOLS for c in password)

    def test_passwords_differ(self):
        assert len({generate_temporary_password() for _ in range(20)}) == 20

    def test_too_short_rejected(self):
        with pytest.raises(ValueError):
            generate_temporary_password(6)


class TestProvisionIdentities:

    def test_profiles_with_login_are_skipped(self):
        provider = RecordingProvider()
        existing = _profile("p1", "a@test.com", auth_user_id=7)
        fresh = _profile("p2", "b@test.com", name="Bea")
        passwords = provision_identities([existing, fresh], provider)
        assert list(passwords) == ["p2"]
        assert [email for email, _, _ in provider.created] == ["b@test.com"]
        assert fresh.auth_user_id == 101
        assert existing.auth_user_id == 7

    def test_returned_password_is_the_one_registered(self):
        provider = RecordingProvider()
        passwords = provision_identities([_profile("p1", "a@test.com")], provider, password_length=16)
        assert provider.created[0][1] == passwords["p1"]
        assert len(passwords["p1"]) == 16

    def test_metadata_fallbacks(self):
        provider = RecordingProvider()
        provision_identities(
            [
                _profile("p1", "ann@test.com", name="Ann Lee", username="alee"),
                _profile("p2", "bob@test.com"),
            ],
            provider,
        )
        assert provider.created[0][2] == {"full_name": "Ann Lee", "username": "alee"}
        assert provider.created[1][2] == {"full_name": "bob@test.com", "username": "bob"}

    def test_failure_is_skipped_and_discarded(self):
        provider = RecordingProvider(fail_for={"bad@test.com"})
        passwords = provision_identities(
            [_profile("p1", "bad@test.com"), _profile("p2", "good@test.com")],
            provider,
        )
        assert list(passwords) == ["p2"]
        assert provider.discarded == 1


class TestLocalIdentityProvider:

    def test_creates_verified_login_and_links_profile(self, db):
        profile = create_profile(db, email="new@test.com", name="New Person")
        provider = LocalIdentityProvider(db)
        passwords = provision_identities([profile], provider)

        db.expire_all()
        user = db.query(User).filter(User.email == "new@test.com").one()
        assert user.is_verified is True
        assert user.is_active is True
        assert user.full_name == "New Person"
        assert db.get(Profile, profile.id).auth_user_id == user.id
        verified, _ = PasswordHelper().verify_and_update(passwords[profile.id], user.hashed_password)
        assert verified

    def test_existing_email_is_not_overwritten(self, db):
        taken = create_profile(db, email="taken@test.com", with_login=True)
        original_hash = db.get(User, taken.auth_user_id).hashed_password
        orphan = create_profile(db, email="taken@test.com")

        passwords = provision_identities([orphan], LocalIdentityProvider(db))

        assert passwords == {}
        db.expire_all()
        assert db.get(Profile, orphan.id).auth_user_id is None
        assert db.get(User, taken.auth_user_id).hashed_password == original_hash

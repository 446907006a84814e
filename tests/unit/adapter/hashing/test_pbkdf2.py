"""Tests for PBKDF2 password hashing."""

from authrepo.adapter.hashing import Pbkdf2PasswordHasher


class TestPbkdf2PasswordHasher:
    """Tests for Pbkdf2PasswordHasher."""

    def test_hash_then_verify(self):
        """Should verify the password it hashed."""
        hasher = Pbkdf2PasswordHasher(iterations=1000)

        password_hash, salt = hasher.hash("correct horse")

        assert hasher.verify("correct horse", password_hash, salt)
        assert not hasher.verify("wrong horse", password_hash, salt)

    def test_salts_are_random(self):
        """Should produce different hashes for the same password."""
        hasher = Pbkdf2PasswordHasher(iterations=1000)

        first = hasher.hash("pw")
        second = hasher.hash("pw")

        assert first[1] != second[1]
        assert first[0] != second[0]

    def test_iteration_count_is_part_of_the_hash(self):
        """Should not verify hashes made with another work factor."""
        password_hash, salt = Pbkdf2PasswordHasher(iterations=1000).hash("pw")

        assert not Pbkdf2PasswordHasher(iterations=2000).verify("pw", password_hash, salt)

    def test_corrupt_stored_values_do_not_verify(self):
        """Should reject stored values that are not base64."""
        hasher = Pbkdf2PasswordHasher(iterations=1000)

        assert not hasher.verify("pw", "not base64!", "also not")

"""Tests for the key registry and decryption-key precedence."""

from __future__ import annotations

import json

import pytest

from secretsync import ENCRYPTION_KEY_ENV, TEMP_ENCRYPTION_KEY_ENV
from secretsync.encryption import generate_key
from secretsync.errors import (
    DecryptionKeyEncodingError,
    KeysFileNotValid,
    MissingDecryptionKey,
    MissingProjectKey,
)
from secretsync.keys import KeyRegistry, resolve_decryption_key


@pytest.fixture
def registry(tmp_path):
    return KeyRegistry.for_secrets_root(tmp_path)


class TestKeyRegistry:
    """Tests for reading and writing keys.json."""

    def test_created_empty_when_missing(self, registry):
        assert not registry.path.exists()
        assert registry.load() == {}
        assert json.loads(registry.path.read_text()) == {}

    def test_ensure_key_generates_once(self, registry):
        first = registry.ensure_key("app")
        second = registry.ensure_key("app")
        assert first == second
        assert registry.load() == {"app": str(first)}

    def test_ensure_key_keeps_other_projects(self, registry):
        registry.save({"other": str(generate_key())})
        registry.ensure_key("app")
        assert set(registry.load()) == {"other", "app"}

    def test_key_for_unknown_project(self, registry):
        with pytest.raises(MissingProjectKey):
            registry.key_for("app")

    def test_invalid_json(self, registry):
        registry.path.write_text("{not json")
        with pytest.raises(KeysFileNotValid):
            registry.load()

    def test_wrong_structure(self, registry):
        registry.path.write_text('{"app": 5}')
        with pytest.raises(KeysFileNotValid):
            registry.load()

    def test_bad_key_value(self, registry):
        registry.save({"app": "not a key!"})
        with pytest.raises(DecryptionKeyEncodingError):
            registry.key_for("app")


class TestResolveDecryptionKey:
    """Tests for environment override precedence."""

    def test_temp_override_wins(self, registry):
        temp, stable = generate_key(), generate_key()
        registry.ensure_key("app")
        environ = {TEMP_ENCRYPTION_KEY_ENV: str(temp), ENCRYPTION_KEY_ENV: str(stable)}
        assert resolve_decryption_key("app", environ, registry) == temp

    def test_stable_override_beats_registry(self, registry):
        stable = generate_key()
        registry.ensure_key("app")
        assert resolve_decryption_key("app", {ENCRYPTION_KEY_ENV: str(stable)}, registry) == stable

    def test_registry_used_without_overrides(self, registry):
        key = registry.ensure_key("app")
        assert resolve_decryption_key("app", {}, registry) == key

    def test_empty_override_is_ignored(self, registry):
        key = registry.ensure_key("app")
        assert resolve_decryption_key("app", {ENCRYPTION_KEY_ENV: ""}, registry) == key

    def test_override_works_without_registry(self):
        key = generate_key()
        assert resolve_decryption_key("app", {ENCRYPTION_KEY_ENV: str(key)}, None) == key

    def test_no_source_at_all(self):
        with pytest.raises(MissingDecryptionKey):
            resolve_decryption_key("app", {}, None)

    def test_project_missing_from_registry(self, registry):
        with pytest.raises(MissingDecryptionKey) as exc_info:
            resolve_decryption_key("app", {}, registry)
        assert exc_info.value.exit_code == 8

    def test_malformed_override_is_reported(self, registry):
        with pytest.raises(DecryptionKeyEncodingError):
            resolve_decryption_key("app", {ENCRYPTION_KEY_ENV: "%%%"}, registry)

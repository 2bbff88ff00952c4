"""
SecretSync — pinned, encrypted secrets for your projects.

Tracks a revision of a shared secrets repository, measures how far a
project has drifted from it, and materializes the declared files into
the project tree. Encrypted at rest, decrypted on apply.
"""

__version__ = "0.1.0"

SECRETS_REPO_ENV = "SECRETS_REPO"
ENCRYPTION_KEY_ENV = "CONFIGURE_ENCRYPTION_KEY"
# Checked before ENCRYPTION_KEY_ENV; used while rotating keys between tool versions
TEMP_ENCRYPTION_KEY_ENV = "CONFIGURE_ENCRYPTION_KEY_TEMP"

CONFIGURE_FILE_NAME = ".configure"
ENCRYPTED_FILES_DIR = ".configure-files"
KEYS_FILE_NAME = "keys.json"

"""
Configuration validation.

Checks a project's ``.configure`` against the secrets store and the
project tree and reports pass/fail with a suggested fix for each item.

Usage:
    secretsync validate
    secretsync validate --json
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .context import SyncContext
from .errors import SecretSyncError
from .keys import resolve_decryption_key
from .models import Configuration


@dataclass
class Check:
    """A single validation result.

    Attributes:
        name: Short check identifier.
        description: Human-readable description.
        passed: Whether the check passed.
        detail: Extra info (path, hash, error message).
        fix: Suggested fix if the check failed.
    """

    name: str
    description: str
    passed: bool
    detail: str = ""
    fix: str = ""


@dataclass
class ValidationReport:
    """All checks run against one configuration."""

    checks: list[Check] = field(default_factory=list)
    configuration_path: str = ""

    @property
    def failed_count(self) -> int:
        return sum(1 for c in self.checks if not c.passed)

    @property
    def all_passed(self) -> bool:
        return self.failed_count == 0

    def to_dict(self) -> dict:
        return {
            "configuration_path": self.configuration_path,
            "passed": self.all_passed,
            "checks": [
                {
                    "name": c.name,
                    "description": c.description,
                    "passed": c.passed,
                    "detail": c.detail,
                    "fix": c.fix,
                }
                for c in self.checks
            ],
        }


def validate_configuration(configuration: Configuration, context: SyncContext) -> ValidationReport:
    """Run every check that applies to this configuration."""
    report = ValidationReport(configuration_path=str(context.configuration_path))
    checks = report.checks

    checks.append(Check(
        name="project_name",
        description="Project name is set",
        passed=bool(configuration.project_name),
        detail=configuration.project_name,
        fix="secretsync update set-project-name <name>",
    ))
    checks.append(Check(
        name="branch",
        description="Secrets branch is set",
        passed=bool(configuration.branch),
        detail=configuration.branch,
        fix="secretsync update set-branch-name <branch>",
    ))
    checks.extend(_pin_checks(configuration, context))
    checks.append(_key_check(configuration, context))

    for secret in configuration.files_to_copy:
        if context.store is not None:
            source = context.secrets_root / secret.source
            checks.append(Check(
                name=f"source:{secret.source}",
                description="Source exists in the secrets repo",
                passed=source.is_file(),
                detail=str(source),
                fix="Check the `file` entry in .configure",
            ))

        encrypted = secret.encrypted_destination(context.project_root)
        checks.append(Check(
            name=f"encrypted:{secret.destination}",
            description="Encrypted copy exists in the project",
            passed=encrypted.is_file(),
            detail=str(encrypted),
            fix="secretsync update",
        ))

    return report


def _pin_checks(configuration: Configuration, context: SyncContext) -> list[Check]:
    checks = [Check(
        name="pinned_hash",
        description="Pinned hash is set",
        passed=bool(configuration.pinned_hash),
        detail=configuration.pinned_hash,
        fix="secretsync update",
    )]
    if context.store is None or not configuration.pinned_hash or not configuration.branch:
        return checks

    try:
        tip = context.store.local_revision(configuration.branch)
        distance = context.store.distance_between(configuration.pinned_hash, tip, tip=tip)
    except SecretSyncError as exc:
        checks.append(Check(
            name="pinned_history",
            description="Pinned hash is on the secrets branch",
            passed=False,
            detail=str(exc),
            fix="secretsync update set-commit-hash <hash>",
        ))
    else:
        checks.append(Check(
            name="pinned_history",
            description="Pinned hash is on the secrets branch",
            passed=True,
            detail=f"{distance} commit(s) behind {configuration.branch}",
        ))
    return checks


def _key_check(configuration: Configuration, context: SyncContext) -> Check:
    try:
        resolve_decryption_key(configuration.project_name, context.environ, context.keys)
    except SecretSyncError as exc:
        return Check(
            name="key",
            description="A decryption key is available",
            passed=False,
            detail=str(exc),
            fix="Add the project to keys.json or set CONFIGURE_ENCRYPTION_KEY",
        )
    return Check(name="key", description="A decryption key is available", passed=True)

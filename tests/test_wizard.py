"""Tests for interactive project setup."""

from __future__ import annotations

from secretsync.models import Configuration, SecretFile
from secretsync.project import read_configuration
from secretsync.wizard import prompt_to_add_file, setup_configuration

from conftest import H1, H2, ScriptedPrompter


class TestSetupConfiguration:
    """Tests for setup_configuration."""

    def test_fresh_project(self, context, store):
        prompter = ScriptedPrompter(
            confirms=[True, False],
            answers=["new-app", "secret.json", "app/secret.json"],
        )

        result = setup_configuration(Configuration(), context, prompter)

        assert result.project_name == "new-app"
        assert result.branch == "trunk"
        assert result.pinned_hash == H2
        assert result.files_to_copy == [SecretFile(source="secret.json", destination="app/secret.json")]
        assert read_configuration(context.configuration_path) == result
        assert "new-app" in context.keys.load()

    def test_pins_local_tip_of_chosen_branch(self, context, store):
        store.branches["release"] = H1
        prompter = ScriptedPrompter(answers=["app"], selection="release")

        result = setup_configuration(Configuration(), context, prompter)

        assert result.branch == "release"
        assert result.pinned_hash == H1

    def test_existing_name_is_not_asked_again(self, context, configuration):
        prompter = ScriptedPrompter()

        result = setup_configuration(configuration, context, prompter)

        assert result.project_name == configuration.project_name
        assert prompter.questions == ["Would you like to add additional files?"]
        assert result.files_to_copy == configuration.files_to_copy

    def test_existing_key_is_kept(self, context, keys, configuration):
        before = keys.key_for(configuration.project_name)
        setup_configuration(configuration, context, ScriptedPrompter())
        assert keys.key_for(configuration.project_name) == before


class TestPromptToAddFile:
    """Tests for prompt_to_add_file."""

    def test_missing_source_is_rejected(self, context):
        prompter = ScriptedPrompter(answers=["nope.json"])
        assert prompt_to_add_file(context, prompter) is None
        assert "nope.json" in prompter.warnings[0]

    def test_valid_source(self, context):
        prompter = ScriptedPrompter(answers=["secret.json", "out/secret.json"])
        secret = prompt_to_add_file(context, prompter)
        assert secret == SecretFile(source="secret.json", destination="out/secret.json")

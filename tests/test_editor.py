"""Tests for editor module."""

import subprocess

import pytest

from conftest import read_json, write_json
from git_companion.config import ConfigSource, RepoSettings, RepoType
from git_companion.editor import EditorState, SettingsEditor, SettingsSession
from git_companion.errors import ConfigParseError, ConfigWriteError, SubcommandFailure
from git_companion.modes import attach


class ScriptedPrompter:
    """Prompter answering from a fixed list of responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.questions = []

    def _next(self, message):
        self.questions.append(message)
        if not self.responses:
            raise AssertionError(f"no scripted response for {message!r}")
        return self.responses.pop(0)

    def ask(self, message):
        return self._next(message)

    def choose(self, message, choices):
        answer = self._next(message)
        assert answer in choices or answer == ""
        return answer

    def confirm(self, message):
        return self._next(message)


def snapshot(*files):
    return [f.read_bytes() for f in files]


@pytest.fixture
def standalone(companion):
    paths, instance_root, _ = companion
    session = SettingsSession.open(paths, ConfigSource.INSTANCE)
    return session, instance_root


@pytest.fixture
def attached(companion):
    paths, _, host_root = companion
    attach(paths)
    session = SettingsSession.open(paths, ConfigSource.HOST)
    return session, host_root


def run_editor(session, *responses, runner=None):
    prompter = ScriptedPrompter(*responses)
    kwargs = {"runner": runner} if runner else {}
    SettingsEditor(session, prompter, **kwargs).run()
    assert prompter.responses == []
    return prompter


class TestSettingsSession:
    """Tests for SettingsSession loading and committing."""

    def test_instance_source(self, standalone):
        session, instance_root = standalone
        assert session.repo_root == instance_root
        assert session.host is None
        assert session.settings.repo_type is RepoType.NOTEBOOKS

    def test_host_source(self, attached):
        session, host_root = attached
        assert session.repo_root == host_root
        assert session.settings.push_commands == "push origin main"

    def test_host_source_requires_host_root(self, companion):
        paths, _, _ = companion
        document = read_json(paths.instance_file)
        del document["hostRepoRoot"]
        write_json(paths.instance_file, document)
        with pytest.raises(ConfigParseError):
            SettingsSession.open(paths, ConfigSource.HOST)

    def test_working_is_projection(self, attached):
        session, host_root = attached
        working = session.working()
        assert working.repo_root == host_root
        assert working.repo_push == "push origin main"

    def test_write_failure_keeps_memory_state(self, standalone, monkeypatch):
        session, _ = standalone

        def fail(config):
            raise ConfigWriteError(session.paths.working_file, "disk full")

        monkeypatch.setattr(session.paths, "save_working", fail)
        new = RepoSettings(push_commands="push other")
        with pytest.raises(ConfigWriteError):
            session.commit(new)
        assert session.settings.push_commands == "push instance main"
        # The persistent document was written before the failure
        assert read_json(session.paths.instance_file)["repoPush"] == "push other"


class TestMenu:
    """Tests for menu navigation."""

    def test_quit(self, standalone):
        session, _ = standalone
        run_editor(session, "5")

    def test_blank_menu_choice_quits(self, standalone):
        session, _ = standalone
        run_editor(session, "")

    @pytest.mark.parametrize("option", ["1", "2", "3", "4"])
    def test_blank_answer_changes_nothing(self, attached, option):
        session, host_root = attached
        files = (session.paths.working_file, session.paths.host_file(host_root),
                 session.paths.instance_file)
        before = snapshot(*files)

        run_editor(session, option, "", "5")

        assert snapshot(*files) == before

    def test_blank_answer_changes_nothing_standalone(self, standalone):
        session, _ = standalone
        session.paths.save_working(session.working())
        files = (session.paths.working_file, session.paths.instance_file)
        before = snapshot(*files)

        run_editor(session, "1", "", "2", "", "3", "", "4", "", "5")

        assert snapshot(*files) == before


class TestEditRepoType:
    """Tests for the repository type flow."""

    def test_writes_both_documents(self, attached):
        session, host_root = attached
        run_editor(session, "1", "notebooks", False, "5")

        host = read_json(session.paths.host_file(host_root))
        assert host["repoType"] == "notebooks"
        assert host["repoSettings"]["repoType"] == "notebooks"
        assert read_json(session.paths.working_file)["repoType"] == "notebooks"

    def test_notebooks_chains_into_notebook_paths(self, attached, tmp_path):
        session, host_root = attached
        source = tmp_path / "notebooks"
        source.mkdir()
        (host_root / "synced").mkdir()

        prompter = run_editor(
            session, "1", "notebooks", True, str(source), "synced", "5"
        )

        assert any(q.startswith("Notebook source") for q in prompter.questions)
        notebooks = read_json(session.paths.host_file(host_root))["repoSettings"]["notebooks"]
        assert notebooks == {"sourcePath": str(source), "destinationPath": "synced"}

    def test_regular_does_not_offer_notebooks(self, standalone):
        session, _ = standalone
        run_editor(session, "1", "regular", "5")
        assert read_json(session.paths.instance_file)["repoType"] == "regular"
        assert read_json(session.paths.working_file)["repoType"] == "regular"


class TestEditPushCommands:
    """Tests for the push commands flow."""

    def test_host_push_commands(self, attached):
        session, host_root = attached
        run_editor(session, "2", "add -A; push origin dev", "5")

        host = read_json(session.paths.host_file(host_root))
        assert host["repoPush"] == "add -A; push origin dev"
        assert host["repoSettings"]["repoPushCommands"] == "add -A; push origin dev"
        assert read_json(session.paths.working_file)["repoPush"] == "add -A; push origin dev"
        # Attached edits never touch the instance's own settings
        assert read_json(session.paths.instance_file)["repoPush"] == "push instance main"

    def test_instance_push_commands(self, standalone):
        session, instance_root = standalone
        run_editor(session, "2", "push origin trunk", "5")

        assert read_json(session.paths.instance_file)["repoPush"] == "push origin trunk"
        assert read_json(session.paths.working_file) == {
            "repoType": "notebooks",
            "repoPush": "push origin trunk",
            "repoRoot": str(instance_root),
        }

    def test_write_failure_returns_to_menu(self, standalone, monkeypatch):
        session, _ = standalone

        def fail(config):
            raise ConfigWriteError(session.paths.instance_file, "permission denied")

        monkeypatch.setattr(session.paths, "save_instance", fail)
        run_editor(session, "2", "push origin trunk", "5")
        assert session.settings.push_commands == "push instance main"


class TestEditNotebookPaths:
    """Tests for the notebook paths flow."""

    def test_relative_destination(self, standalone, tmp_path):
        session, instance_root = standalone
        source = tmp_path / "notebooks"
        source.mkdir()
        (instance_root / "out").mkdir()

        run_editor(session, "3", str(source), "out", "5")

        settings = read_json(session.paths.instance_file)["repoSettings"]
        assert settings["notebooks"] == {"sourcePath": str(source), "destinationPath": "out"}

    def test_relative_source_is_rejected(self, standalone, tmp_path):
        session, instance_root = standalone
        source = tmp_path / "notebooks"
        source.mkdir()
        (instance_root / "out").mkdir()

        prompter = run_editor(session, "3", "notebooks", str(source), "out", "5")

        assert sum(q.startswith("Notebook source") for q in prompter.questions) == 2

    def test_missing_source_is_rejected(self, standalone, tmp_path):
        session, _ = standalone
        run_editor(session, "3", str(tmp_path / "gone"), "", "5")
        assert "repoSettings" not in read_json(session.paths.instance_file)

    def test_destination_equal_to_source_is_rejected(self, attached):
        session, host_root = attached
        source = host_root / "notebooks"
        source.mkdir()
        before = snapshot(session.paths.host_file(host_root), session.paths.working_file)

        prompter = run_editor(
            session, "3", str(source), "notebooks", str(source), "./notebooks/../notebooks", "", "5"
        )

        assert sum(q.startswith("Notebook destination") for q in prompter.questions) == 4
        assert snapshot(session.paths.host_file(host_root), session.paths.working_file) == before

    def test_missing_destination_is_rejected(self, attached, tmp_path):
        session, host_root = attached
        source = tmp_path / "notebooks"
        source.mkdir()
        (host_root / "out").mkdir()

        run_editor(session, "3", str(source), "missing", "out", "5")

        notebooks = read_json(session.paths.host_file(host_root))["repoSettings"]["notebooks"]
        assert notebooks["destinationPath"] == "out"

    def test_unknown_user_in_source_is_rejected(self, standalone):
        session, _ = standalone

        prompter = run_editor(session, "3", "~nosuchuser-gitcompanion/notebooks", "", "5")

        assert sum(q.startswith("Notebook source") for q in prompter.questions) == 2
        assert "repoSettings" not in read_json(session.paths.instance_file)

    def test_unknown_user_in_destination_is_rejected(self, standalone, tmp_path):
        session, instance_root = standalone
        source = tmp_path / "notebooks"
        source.mkdir()
        (instance_root / "out").mkdir()

        prompter = run_editor(
            session, "3", str(source), "~nosuchuser-gitcompanion/out", "out", "5"
        )

        assert sum(q.startswith("Notebook destination") for q in prompter.questions) == 2
        settings = read_json(session.paths.instance_file)["repoSettings"]
        assert settings["notebooks"]["destinationPath"] == "out"


class TestEditInitCommands:
    """Tests for the init commands flow."""

    def test_stores_without_running(self, attached):
        session, host_root = attached
        calls = []

        run_editor(
            session, "4", "fetch; status", False, "5",
            runner=lambda root, commands: calls.append((root, commands)),
        )

        host = read_json(session.paths.host_file(host_root))
        assert host["repoSettings"]["initGitCommands"] == "fetch; status"
        assert calls == []

    def test_runs_in_working_root(self, attached):
        session, host_root = attached

        run_editor(session, "4", "tag initialized", True, "5")

        result = subprocess.run(
            ["git", "tag", "--list"], cwd=host_root, check=True, capture_output=True, text=True
        )
        assert result.stdout.split() == ["initialized"]

    def test_failure_returns_to_menu(self, standalone):
        session, instance_root = standalone

        def failing(root, commands):
            raise SubcommandFailure("badcommand", 1)

        run_editor(session, "4", "badcommand", True, "5", runner=failing)
        settings = read_json(session.paths.instance_file)["repoSettings"]
        assert settings["initGitCommands"] == "badcommand"


class TestEditorStates:
    """Tests for running the state machine from a given state."""

    def test_start_in_edit_state(self, standalone):
        session, _ = standalone
        prompter = ScriptedPrompter("push x", "5")
        SettingsEditor(session, prompter).run(EditorState.PUSH_COMMANDS)
        assert session.settings.push_commands == "push x"

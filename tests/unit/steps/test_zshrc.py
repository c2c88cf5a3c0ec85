"""Unit tests for the managed .zshrc step."""

from datetime import datetime
from pathlib import Path

import pytest

from shellstrap.core.backup import BackupRotator
from shellstrap.core.environment import Environment
from shellstrap.steps.zshrc import (
    GENERATED_MARKER,
    PRESERVED_MARKER,
    ManagedConfigFile,
    ZshrcStep,
    aliases_source_line,
    preserved_section,
    render_zshrc,
    write_atomic,
)

PLUGINS = ["zsh-autosuggestions", "zsh-syntax-highlighting", "zsh-completions"]


@pytest.fixture
def zshrc(home: Path) -> Path:
    return home / ".zshrc"


@pytest.fixture
def step(zshrc: Path, env: Environment) -> ZshrcStep:
    return ZshrcStep(zshrc, env.aliases_path, PLUGINS, BackupRotator(keep=2))


def _backups(zshrc: Path) -> list[Path]:
    return sorted(zshrc.parent.glob(".zshrc.backup.*"))


class TestRenderZshrc:
    """Tests for template rendering."""

    def test_substitutes_placeholders(self, tmp_path: Path) -> None:
        text = render_zshrc(tmp_path / ".aliases", PLUGINS)

        assert "@PLUGINS@" not in text
        assert "@ALIASES_PATH@" not in text
        assert f'source "{tmp_path / ".aliases"}"' in text
        assert "    git\n    zsh-autosuggestions\n" in text
        assert GENERATED_MARKER in text
        assert text.rstrip().endswith(PRESERVED_MARKER)

    def test_no_extra_plugins(self, tmp_path: Path) -> None:
        text = render_zshrc(tmp_path / ".aliases", [], template="plugins=(\n    git\n@PLUGINS@\n)")
        assert text == "plugins=(\n    git\n)"


class TestPreservedSection:
    """Tests for preserved_section."""

    def test_text_below_marker(self) -> None:
        content = f"generated\n{PRESERVED_MARKER}\nexport EDITOR=nvim\n"
        assert preserved_section(content) == "export EDITOR=nvim\n"

    def test_no_marker_or_empty_tail(self) -> None:
        assert preserved_section("hand written\n") == ""
        assert preserved_section(f"x\n{PRESERVED_MARKER}\n\n") == ""


class TestManagedConfigFile:
    """Tests for ManagedConfigFile."""

    def test_missing_file(self, tmp_path: Path) -> None:
        managed = ManagedConfigFile(tmp_path / "rc", ("a", "b"))
        assert managed.read() is None
        assert managed.missing_markers() == ["a", "b"]
        assert not managed.is_converged()

    def test_markers(self, tmp_path: Path) -> None:
        path = tmp_path / "rc"
        path.write_text("a only")
        managed = ManagedConfigFile(path, ("a", "b"))

        assert managed.missing_markers() == ["b"]
        path.write_text("a and b")
        assert managed.is_converged()


def test_write_atomic_replaces_content(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "rc"
    write_atomic(path, "one")
    write_atomic(path, "two")

    assert path.read_text() == "two"
    assert list(path.parent.iterdir()) == [path]


class TestZshrcStep:
    """Tests for ZshrcStep."""

    def test_markers(self, step: ZshrcStep, env: Environment) -> None:
        source = f'source "{env.aliases_path}"'
        assert step.managed.markers == (GENERATED_MARKER, *PLUGINS, "oh-my-posh", source)

    def test_creates_missing_file_without_backup(
        self, step: ZshrcStep, zshrc: Path, env: Environment
    ) -> None:
        result = step.apply(env)

        assert result.success
        assert zshrc.is_file()
        assert _backups(zshrc) == []

    def test_probe_converged_after_apply(
        self, step: ZshrcStep, zshrc: Path, env: Environment
    ) -> None:
        assert not step.probe(env).satisfied

        step.apply(env)

        assert step.probe(env).satisfied

    def test_fully_marked_file_is_left_alone(
        self, step: ZshrcStep, zshrc: Path, env: Environment
    ) -> None:
        """A file with every marker is satisfied; its bytes are never touched."""
        content = (
            "# Generated by shellstrap\n"
            + "\n".join(PLUGINS)
            + f"\noh-my-posh\n{aliases_source_line(env.aliases_path)}\n"
        )
        zshrc.write_text(content)

        assert step.probe(env).satisfied
        assert zshrc.read_text() == content
        assert _backups(zshrc) == []

    def test_aliases_mention_is_not_the_source_line(
        self, step: ZshrcStep, zshrc: Path, env: Environment
    ) -> None:
        zshrc.write_text(
            "# Generated by shellstrap\n"
            + "\n".join(PLUGINS)
            + "\noh-my-posh\n# my .aliases live in dotfiles\n"
        )

        assert not step.probe(env).satisfied

    def test_moved_aliases_file_triggers_regeneration(
        self, step: ZshrcStep, zshrc: Path, env: Environment, tmp_path: Path
    ) -> None:
        step.apply(env)
        moved = ZshrcStep(zshrc, tmp_path / "elsewhere" / ".aliases", PLUGINS)

        assert not moved.probe(env).satisfied

    def test_partial_file_is_backed_up_and_replaced(
        self, step: ZshrcStep, zshrc: Path, env: Environment
    ) -> None:
        """A file missing one marker gets exactly one backup and a full rewrite."""
        content = "# Generated by shellstrap\n" + "\n".join(PLUGINS) + "\noh-my-posh\n"
        zshrc.write_text(content)

        probe = step.probe(env)
        assert not probe.satisfied
        assert probe.detail == f"missing: {aliases_source_line(env.aliases_path)}"

        result = step.apply(env)

        assert result.success
        backups = _backups(zshrc)
        assert len(backups) == 1
        assert backups[0].read_text() == content
        assert zshrc.read_text() == render_zshrc(env.aliases_path, PLUGINS)

    def test_preserved_area_survives(
        self, step: ZshrcStep, zshrc: Path, env: Environment
    ) -> None:
        zshrc.write_text(f"old config\n{PRESERVED_MARKER}\nexport EDITOR=nvim\n")

        step.apply(env)

        text = zshrc.read_text()
        assert text.endswith(f"{PRESERVED_MARKER}\nexport EDITOR=nvim\n")
        assert text.count(PRESERVED_MARKER) == 1

    def test_empty_file_is_not_backed_up(
        self, step: ZshrcStep, zshrc: Path, env: Environment
    ) -> None:
        zshrc.write_text("")

        assert step.apply(env).success
        assert _backups(zshrc) == []

    def test_backups_rotated(self, step: ZshrcStep, zshrc: Path, env: Environment) -> None:
        """Only the newest ``keep`` backups remain after a regeneration."""
        rotator = BackupRotator(keep=5)
        zshrc.write_text("old")
        for second in range(3):
            rotator.create(zshrc, now=datetime(2024, 1, 1, 12, 0, second))

        step.apply(env)

        backups = _backups(zshrc)
        assert len(backups) == 2
        assert zshrc.name + ".backup.20240101-120000" not in [b.name for b in backups]

    def test_backup_failure_leaves_file(self, zshrc: Path, env: Environment) -> None:
        class BrokenRotator(BackupRotator):
            def create(self, original: Path, now: datetime | None = None):  # type: ignore[override]
                raise PermissionError("read-only")

        zshrc.write_text("precious")
        step = ZshrcStep(zshrc, env.aliases_path, PLUGINS, BrokenRotator())

        result = step.apply(env)

        assert result.failed
        assert zshrc.read_text() == "precious"

"""Managed ~/.zshrc step.

The file counts as converged when it carries every marker of the generated
configuration. A partially matching file is regenerated as a whole after a
timestamped backup; whatever the user added below the preserved-area line
survives regeneration.
"""

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from tempfile import NamedTemporaryFile

from shellstrap.core.backup import BackupRotator
from shellstrap.core.environment import Environment
from shellstrap.models.outcome import ApplyResult, ProbeResult
from shellstrap.steps.base import ConvergenceStep
from shellstrap.utils.formatting import print_info, print_success, print_warning

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "zshrc.template"
GENERATED_MARKER = "Generated by shellstrap"
PRESERVED_MARKER = "# This area is preserved during updates"


@dataclass(frozen=True, slots=True)
class ManagedConfigFile:
    """A configuration file identified by a signature set of markers.

    Attributes:
        path: Location of the file.
        markers: Substrings that must all be present for the file to count
            as generated by us.
    """

    path: Path
    markers: tuple[str, ...]

    def read(self) -> str | None:
        """Return the file content, or None if it does not exist."""
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def missing_markers(self, content: str | None = None) -> list[str]:
        """Markers absent from the file (all of them if it does not exist)."""
        text = self.read() if content is None else content
        if text is None:
            return list(self.markers)
        return [m for m in self.markers if m not in text]

    def is_converged(self) -> bool:
        """Check that the file exists and contains every marker."""
        return self.read() is not None and not self.missing_markers()


def load_template() -> str:
    """Read the bundled zshrc template."""
    return resources.files("shellstrap.data").joinpath(TEMPLATE_NAME).read_text(encoding="utf-8")


def render_zshrc(aliases_path: Path, plugins: Sequence[str], template: str | None = None) -> str:
    """Fill the template with the aliases path and the extra plugin names."""
    text = template if template is not None else load_template()
    plugin_lines = "\n".join(f"    {name}" for name in plugins)
    text = text.replace("@PLUGINS@\n", f"{plugin_lines}\n" if plugin_lines else "")
    return text.replace("@ALIASES_PATH@", str(aliases_path))


def aliases_source_line(aliases_path: Path) -> str:
    """The line of the generated file that sources the aliases."""
    return f'source "{aliases_path}"'


def preserved_section(content: str) -> str:
    """Return the user's text below the preserved-area line, or ''."""
    index = content.find(PRESERVED_MARKER)
    if index == -1:
        return ""
    _, _, rest = content[index + len(PRESERVED_MARKER) :].partition("\n")
    return rest if rest.strip() else ""


def write_atomic(path: Path, content: str) -> None:
    """Replace a file's content in one rename.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
        os.replace(tmp_path, path)
    except OSError:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise


class ZshrcStep(ConvergenceStep):
    """Ensures ~/.zshrc is the generated configuration.

    Attributes:
        managed: The managed file and its signature markers.
        aliases_path: Aliases file sourced by the generated configuration.
        plugins: Plugin names enabled after ``git``.
        rotator: Backup creator and pruner.
    """

    name = "zshrc"
    description = "~/.zshrc is the managed configuration"

    def __init__(
        self,
        path: Path,
        aliases_path: Path,
        plugins: Sequence[str],
        rotator: BackupRotator | None = None,
    ) -> None:
        self.aliases_path = aliases_path
        self.plugins = list(plugins)
        self.rotator = rotator or BackupRotator()
        markers = (
            GENERATED_MARKER,
            *self.plugins,
            "oh-my-posh",
            aliases_source_line(aliases_path),
        )
        self.managed = ManagedConfigFile(path=path, markers=markers)

    def probe(self, env: Environment) -> ProbeResult:
        content = self.managed.read()
        if content is None:
            return ProbeResult(satisfied=False, detail=f"{self.managed.path} does not exist")
        missing = self.managed.missing_markers(content)
        if missing:
            return ProbeResult(satisfied=False, detail=f"missing: {', '.join(missing)}")
        return ProbeResult(satisfied=True, detail=str(self.managed.path))

    def apply(self, env: Environment) -> ApplyResult:
        path = self.managed.path
        old = self.managed.read()

        backup_note = ""
        if old:
            try:
                backup = self.rotator.create(path)
            except OSError as e:
                # Never overwrite a file we could not back up
                return ApplyResult.fail(f"Could not back up {path}: {e}")
            print_info(f"Backed up existing .zshrc to {backup.path}")
            self.rotator.rotate(path)
            backup_note = f", backup {backup.path.name}"

        content = render_zshrc(self.aliases_path, self.plugins)
        tail = preserved_section(old or "")
        if tail:
            content += tail

        try:
            write_atomic(path, content)
        except OSError as e:
            return ApplyResult.fail(f"Could not write {path}: {e}")

        if not self.aliases_path.is_file():
            print_warning(f"Aliases file {self.aliases_path} not found; zsh will report it on start")
        print_success(f"{path} configured")
        return ApplyResult.ok(f"regenerated{backup_note}")

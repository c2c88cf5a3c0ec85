"""Unit tests for the nvm, Node.js and npm tool steps."""

from pathlib import Path
from unittest.mock import patch

import pytest

from shellstrap.core.environment import Environment
from shellstrap.core.errors import ErrorKind
from shellstrap.steps.node import (
    NodeRuntimeStep,
    NpmToolStep,
    NvmStep,
    nvm_shell,
    parse_major_version,
)
from shellstrap.utils.shell import CommandResult

OK = CommandResult(stdout="", stderr="", returncode=0)
NOT_FOUND = CommandResult(stdout="", stderr="", returncode=127)


class FakeShell:
    """Stands in for bash: tracks what nvm, node and npm have installed."""

    def __init__(
        self,
        env: Environment,
        node: str | None = None,
        npm: bool = False,
        network: bool = True,
    ) -> None:
        self.env = env
        self.node = node
        self.npm = npm
        self.network = network
        self.globals: set[str] = set()
        self.scripts: list[str] = []
        self.envs: list[dict[str, str]] = []

    def __call__(self, script: str, **kwargs: object) -> CommandResult:
        self.scripts.append(script)
        self.envs.append(kwargs.get("env") or {})  # type: ignore[arg-type]
        if "install.sh | bash" in script:
            if not self.network:
                return CommandResult(stdout="", stderr="curl: (6)", returncode=6)
            self.env.nvm_script.write_text("# nvm\n")
            return OK
        if "nvm install" in script:
            if not self.network:
                return CommandResult(stdout="", stderr="download failed", returncode=3)
            self.node, self.npm = "v22.11.0", True
            return OK
        if "npm i -g" in script:
            self.globals.add(script.rsplit(" ", 1)[1])
            return OK
        if script.endswith("node --version"):
            if self.node is None:
                return NOT_FOUND
            return CommandResult(stdout=f"{self.node}\n", stderr="", returncode=0)
        if "command -v " in script:
            command = script.rsplit("command -v ", 1)[1]
            found = (command == "npm" and self.npm) or command in self.globals
            return OK if found else NOT_FOUND
        return NOT_FOUND


@pytest.fixture
def with_nvm(env: Environment) -> Path:
    env.nvm_dir.mkdir()
    env.nvm_script.write_text("# nvm\n")
    return env.nvm_script


class TestParseMajorVersion:
    """Tests for parse_major_version."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("v18.1.0", 18), ("v22.11.0\n", 22), ("22", 22), ("garbage", None), ("v1x", None)],
    )
    def test_parse(self, text: str, expected: int | None) -> None:
        assert parse_major_version(text) == expected


class TestNvmShell:
    """Tests for nvm_shell."""

    def test_sources_nvm_when_installed(self, env: Environment, with_nvm: Path) -> None:
        with patch("shellstrap.steps.node.run_script", return_value=OK) as mock_script:
            nvm_shell(env, "node --version")

        script = mock_script.call_args.args[0]
        assert script == f". {with_nvm} >/dev/null 2>&1; node --version"
        assert mock_script.call_args.kwargs["env"]["NVM_DIR"] == str(env.nvm_dir)

    def test_plain_without_nvm(self, env: Environment) -> None:
        with patch("shellstrap.steps.node.run_script", return_value=OK) as mock_script:
            nvm_shell(env, "node --version")

        assert mock_script.call_args.args[0] == "node --version"


class TestNvmStep:
    """Tests for NvmStep."""

    def test_probe_rejects_empty_script(self, env: Environment) -> None:
        env.nvm_dir.mkdir()
        env.nvm_script.write_text("")

        assert not NvmStep().probe(env).satisfied

    def test_apply(self, env: Environment) -> None:
        shell = FakeShell(env)
        with patch("shellstrap.steps.node.run_script", side_effect=shell):
            result = NvmStep("v0.40.1").apply(env)

        assert result.success
        assert "nvm-sh/nvm/v0.40.1/install.sh" in shell.scripts[0]
        assert shell.envs[0]["PROFILE"] == "/dev/null"

    def test_apply_offline(self, env: Environment) -> None:
        with patch("shellstrap.steps.node.run_script", side_effect=FakeShell(env, network=False)):
            result = NvmStep().apply(env)

        assert result.failed
        assert result.error_kind == ErrorKind.NETWORK


class TestNodeRuntimeStep:
    """Tests for NodeRuntimeStep."""

    def test_probe_missing(self, env: Environment) -> None:
        with patch("shellstrap.steps.node.run_script", side_effect=FakeShell(env)):
            probe = NodeRuntimeStep().probe(env)

        assert not probe.satisfied
        assert probe.detail == "node not found"

    def test_probe_too_old(self, env: Environment) -> None:
        """Node 18 does not satisfy a minimum of 22."""
        shell = FakeShell(env, node="v18.1.0", npm=True)
        with patch("shellstrap.steps.node.run_script", side_effect=shell):
            probe = NodeRuntimeStep(min_major=22).probe(env)

        assert not probe.satisfied
        assert probe.detail == "node v18.1.0 is below v22"

    def test_probe_without_npm(self, env: Environment) -> None:
        shell = FakeShell(env, node="v22.1.0", npm=False)
        with patch("shellstrap.steps.node.run_script", side_effect=shell):
            assert NodeRuntimeStep().probe(env).detail == "npm not found"

    def test_probe_satisfied(self, env: Environment) -> None:
        shell = FakeShell(env, node="v23.0.0", npm=True)
        with patch("shellstrap.steps.node.run_script", side_effect=shell):
            assert NodeRuntimeStep().probe(env).satisfied

    def test_apply_installs_nvm_first(self, env: Environment) -> None:
        """nvm is converged on demand before node is installed through it."""
        shell = FakeShell(env, node="v18.1.0")
        with patch("shellstrap.steps.node.run_script", side_effect=shell):
            result = NodeRuntimeStep(min_major=22).apply(env)

        assert result.success
        assert result.detail == "node v22.11.0"
        assert env.nvm_script.is_file()
        install = next(s for s in shell.scripts if "nvm install" in s)
        assert install.endswith("nvm install 22 && nvm alias default 22 && nvm use default")

    def test_apply_with_existing_nvm(self, env: Environment, with_nvm: Path) -> None:
        shell = FakeShell(env)
        with patch("shellstrap.steps.node.run_script", side_effect=shell):
            result = NodeRuntimeStep().apply(env)

        assert result.success
        assert not any("install.sh" in s for s in shell.scripts)

    def test_apply_nvm_failure(self, env: Environment) -> None:
        with patch("shellstrap.steps.node.run_script", side_effect=FakeShell(env, network=False)):
            result = NodeRuntimeStep().apply(env)

        assert result.failed
        assert result.error_kind == ErrorKind.NETWORK
        assert "cannot install Node.js" in (result.error or "")


class TestNpmToolStep:
    """Tests for NpmToolStep."""

    def test_named_after_package(self) -> None:
        step = NpmToolStep("clawdbot")
        assert step.name == "clawdbot"
        assert step.commands == ("clawdbot",)

    def test_apply_with_npm(self, env: Environment, with_nvm: Path) -> None:
        shell = FakeShell(env, node="v22.1.0", npm=True)
        with patch("shellstrap.steps.node.run_script", side_effect=shell):
            step = NpmToolStep("clawdbot")
            assert not step.probe(env).satisfied
            result = step.apply(env)
            assert step.probe(env).satisfied

        assert result.success
        assert not any("nvm install" in s for s in shell.scripts)

    def test_apply_installs_node_when_npm_missing(self, env: Environment) -> None:
        shell = FakeShell(env)
        with patch("shellstrap.steps.node.run_script", side_effect=shell):
            result = NpmToolStep("clawdbot").apply(env)

        assert result.success
        assert "clawdbot" in shell.globals
        assert any("nvm install" in s for s in shell.scripts)

    def test_apply_node_failure(self, env: Environment) -> None:
        with patch("shellstrap.steps.node.run_script", side_effect=FakeShell(env, network=False)):
            result = NpmToolStep("clawdbot").apply(env)

        assert result.failed
        assert "cannot install clawdbot" in (result.error or "")

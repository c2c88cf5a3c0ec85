"""Setup configuration and settings.

This module provides the configuration model and I/O functions for the
convergence run: which packages, plugins and tools to converge and where
managed files live.

Configuration is stored in ~/.config/shellstrap/config.toml. The file is
optional; every field has a default matching the stock bootstrap.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shellstrap.core.errors import ShellstrapError
from shellstrap.core.paths import get_config_path

# Essential tools followed by network tools, per package manager
DEFAULT_APT_PACKAGES: list[str] = [
    "curl", "wget", "tree", "htop", "jq",
    "net-tools", "dnsutils", "iputils-ping", "traceroute", "nmap",
    "netcat-openbsd", "tcpdump", "iftop", "mtr", "whois", "nload",
]  # fmt: skip
DEFAULT_YUM_PACKAGES: list[str] = [
    "curl", "wget", "tree", "htop", "jq",
    "net-tools", "bind-utils", "iputils", "traceroute", "nmap",
    "nmap-ncat", "tcpdump", "iftop", "mtr", "whois",
]  # fmt: skip
DEFAULT_BREW_PACKAGES: list[str] = [
    "curl", "wget", "tree", "htop", "jq", "nmap", "mtr", "whois", "iftop",
]  # fmt: skip


class PackagesConfig(BaseModel):
    """Desired package names per system package manager."""

    model_config = ConfigDict(extra="forbid")

    apt: Annotated[list[str], Field(default_factory=lambda: list(DEFAULT_APT_PACKAGES))]
    yum: Annotated[list[str], Field(default_factory=lambda: list(DEFAULT_YUM_PACKAGES))]
    brew: Annotated[list[str], Field(default_factory=lambda: list(DEFAULT_BREW_PACKAGES))]


class PluginSpec(BaseModel):
    """A zsh plugin cloned into the Oh My Zsh custom plugin directory.

    Attributes:
        name: Plugin name, also the target subdirectory.
        url: Git URL to clone from.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, pattern=r"^[A-Za-z0-9._-]+$")]
    url: Annotated[str, Field(min_length=1)]


def _default_plugins() -> list[PluginSpec]:
    return [
        PluginSpec(
            name="zsh-autosuggestions",
            url="https://github.com/zsh-users/zsh-autosuggestions.git",
        ),
        PluginSpec(
            name="zsh-syntax-highlighting",
            url="https://github.com/zsh-users/zsh-syntax-highlighting.git",
        ),
        PluginSpec(
            name="zsh-completions",
            url="https://github.com/zsh-users/zsh-completions.git",
        ),
    ]


class ZshrcConfig(BaseModel):
    """Managed run-control file settings.

    Attributes:
        path: Managed file, relative paths resolve against $HOME.
        aliases: Aliases file to source; None means <dotfiles_dir>/.aliases.
        backups_keep: Number of timestamped backups retained.
    """

    model_config = ConfigDict(extra="forbid")

    path: str = "~/.zshrc"
    aliases: str | None = None
    backups_keep: Annotated[int, Field(ge=1, le=50)] = 3


class NodeConfig(BaseModel):
    """Runtime version requirements.

    Attributes:
        min_major: Lowest acceptable Node.js major version.
        nvm_version: nvm release tag installed on demand.
        npm_tools: Global npm packages to install (step name = package name).
    """

    model_config = ConfigDict(extra="forbid")

    min_major: Annotated[int, Field(ge=1)] = 22
    nvm_version: str = "v0.40.1"
    npm_tools: Annotated[list[str], Field(default_factory=lambda: ["clawdbot"])]


class RepositoryConfig(BaseModel):
    """Auxiliary repository checkout.

    Attributes:
        enabled: Whether the clone step is registered.
        name: Checkout directory name.
        url: Clone URL.
        parents: Candidate parent directories in priority order.
    """

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    name: Annotated[str, Field(min_length=1)] = "integrations-hub"
    url: Annotated[str, Field(min_length=1)] = "git@github.com:Zampfi/integrations-hub.git"
    parents: Annotated[
        list[str],
        Field(min_length=1, default_factory=lambda: ["~/zamp/services", "~/services"]),
    ]


class StepsConfig(BaseModel):
    """Step selection.

    Attributes:
        disabled: Step names that are never registered.
    """

    model_config = ConfigDict(extra="forbid")

    disabled: Annotated[list[str], Field(default_factory=list)]


class SetupConfig(BaseModel):
    """Complete convergence configuration."""

    model_config = ConfigDict(extra="forbid")

    packages: Annotated[PackagesConfig, Field(default_factory=PackagesConfig)]
    plugins: Annotated[list[PluginSpec], Field(default_factory=_default_plugins)]
    zshrc: Annotated[ZshrcConfig, Field(default_factory=ZshrcConfig)]
    node: Annotated[NodeConfig, Field(default_factory=NodeConfig)]
    repository: Annotated[RepositoryConfig, Field(default_factory=RepositoryConfig)]
    steps: Annotated[StepsConfig, Field(default_factory=StepsConfig)]

    @field_validator("plugins")
    @classmethod
    def validate_unique_plugins(cls, plugins: list[PluginSpec]) -> list[PluginSpec]:
        """Reject plugin lists that name the same plugin twice."""
        names = [p.name for p in plugins]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            msg = f"Duplicate plugin names: {sorted(duplicates)}"
            raise ValueError(msg)
        return plugins

    def is_enabled(self, step: str) -> bool:
        """Check whether a step name is not disabled by configuration."""
        return step not in self.steps.disabled


class ConfigError(ShellstrapError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the config content is invalid."""


def load_config(path: Path | None = None) -> SetupConfig:
    """Load and validate configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated SetupConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return SetupConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> SetupConfig:
    """Load configuration, falling back to defaults when no file exists.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        return SetupConfig()


def save_config(config: SetupConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        config: The SetupConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def config_to_dict(config: SetupConfig) -> dict[str, Any]:
    """Convert SetupConfig to a dictionary for TOML serialization.

    TOML has no null, so unset optional values are dropped.
    """
    return config.model_dump(mode="json", exclude_none=True)

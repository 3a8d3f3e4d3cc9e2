"""
Configuration documents and their JSON storage.

Three documents are involved:

- instance config: the companion tool's own settings, including whether it
  runs standalone or attached to a host repository.
- host config: settings owned by the host repository.
- working config: a projection of whichever of the two is authoritative,
  pointed at the active repository root. It is regenerated, never edited.

"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import ConfigNotFound, ConfigParseError, ConfigWriteError
from .paths import resolve_path

logger = logging.getLogger(__name__)

INSTANCE_CONFIG_NAME = "instance_config.json"
WORKING_CONFIG_NAME = "working_config.json"
HOST_CONFIG_NAME = "repo_config.json"


class InstanceType(str, Enum):
    STANDALONE = "standalone"
    COMPANION = "companion"


class RepoType(str, Enum):
    REGULAR = "regular"
    NOTEBOOKS = "notebooks"


class ConfigSource(Enum):
    """Which document owns the durable settings."""

    INSTANCE = "instance"
    HOST = "host"

    @classmethod
    def for_instance_type(cls, instance_type: InstanceType) -> "ConfigSource":
        if instance_type is InstanceType.COMPANION:
            return cls.HOST
        return cls.INSTANCE


def load_json(path: Path) -> dict[str, Any]:
    """
    Load a JSON object from disk.

    Raises:
        ConfigNotFound: If the file is missing or cannot be read.
        ConfigParseError: If the content is not UTF-8 text holding a JSON object.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigNotFound(path, "file not found") from e
    except OSError as e:
        raise ConfigNotFound(path, f"cannot read file ({e.strerror})") from e
    except UnicodeDecodeError as e:
        raise ConfigParseError(path, f"not valid UTF-8 (byte {e.start})") from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigParseError(path, f"invalid JSON ({e})") from e

    if not isinstance(document, dict):
        raise ConfigParseError(path, "expected a JSON object")
    return document


def save_json(path: Path, document: dict[str, Any]) -> None:
    """
    Overwrite `path` with `document` as indented JSON.

    Keys keep their insertion order so repeated saves produce stable output.

    Raises:
        ConfigWriteError: On any I/O failure.
    """
    text = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ConfigWriteError(path, f"cannot write file ({e.strerror})") from e
    logger.debug("Wrote %s", path)


def _commands(value: Any) -> str:
    """Normalize a stored command list to the `;`-delimited string form."""
    if value is None:
        return ""
    if isinstance(value, list):
        return "; ".join(str(item).strip() for item in value if str(item).strip())
    if isinstance(value, str):
        return value
    raise ValueError(f"expected a command string, got {type(value).__name__}")


@dataclass
class NotebookPaths:
    source_path: str = ""
    destination_path: str = ""

    def is_set(self) -> bool:
        return bool(self.source_path or self.destination_path)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "NotebookPaths":
        data = data or {}
        return cls(
            source_path=data.get("sourcePath") or "",
            destination_path=data.get("destinationPath") or "",
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "sourcePath": self.source_path,
            "destinationPath": self.destination_path,
        }


@dataclass
class RepoSettings:
    """
    The workflow settings the editor changes.

    `push_commands` and `init_commands` are `;`-delimited git subcommand
    lists, e.g. "add -A; commit -m wip; push origin main".
    """

    repo_type: RepoType = RepoType.REGULAR
    push_commands: str = ""
    init_commands: str = ""
    notebooks: NotebookPaths = field(default_factory=NotebookPaths)

    @classmethod
    def from_documents(cls, top: dict[str, Any], block: dict[str, Any] | None) -> "RepoSettings":
        """
        Build settings from a document's top-level fields and its repoSettings block.

        The top-level `repoType` / `repoPush` win over their copies in the block.
        """
        block = block or {}
        repo_type = top.get("repoType", block.get("repoType", RepoType.REGULAR.value))
        push = top.get("repoPush", block.get("repoPushCommands"))
        return cls(
            repo_type=RepoType(repo_type),
            push_commands=_commands(push),
            init_commands=_commands(block.get("initGitCommands")),
            notebooks=NotebookPaths.from_dict(block.get("notebooks")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "repoType": self.repo_type.value,
            "repoPushCommands": self.push_commands,
            "initGitCommands": self.init_commands,
            "notebooks": self.notebooks.to_dict(),
        }


@dataclass
class InstanceConfig:
    instance_type: InstanceType
    instance_repo_root: str
    host_repo_root: str | None = None
    settings: RepoSettings = field(default_factory=RepoSettings)
    has_settings_block: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = ("instanceType", "instanceRepoRoot", "hostRepoRoot", "repoType", "repoPush", "repoSettings")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstanceConfig":
        if not data.get("instanceRepoRoot"):
            raise ValueError("missing field 'instanceRepoRoot'")
        return cls(
            instance_type=InstanceType(data.get("instanceType", InstanceType.STANDALONE.value)),
            instance_repo_root=data["instanceRepoRoot"],
            host_repo_root=data.get("hostRepoRoot") or None,
            settings=RepoSettings.from_documents(data, data.get("repoSettings")),
            has_settings_block="repoSettings" in data,
            extra={k: v for k, v in data.items() if k not in cls._KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "instanceType": self.instance_type.value,
            "instanceRepoRoot": self.instance_repo_root,
        }
        if self.host_repo_root is not None:
            document["hostRepoRoot"] = self.host_repo_root
        document["repoType"] = self.settings.repo_type.value
        document["repoPush"] = self.settings.push_commands
        if (
            self.has_settings_block
            or self.settings.init_commands
            or self.settings.notebooks.is_set()
        ):
            document["repoSettings"] = self.settings.to_dict()
        document.update(self.extra)
        return document

    def instance_root(self, base: Path) -> Path:
        return resolve_path(self.instance_repo_root, base=base)

    def host_root(self, base: Path) -> Path | None:
        if self.host_repo_root is None:
            return None
        return resolve_path(self.host_repo_root, base=base)


@dataclass
class HostConfig:
    settings: RepoSettings = field(default_factory=RepoSettings)
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = ("repoType", "repoPush", "repoSettings")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HostConfig":
        for key in ("repoType", "repoPush"):
            if key not in data:
                raise ValueError(f"missing field '{key}'")
        return cls(
            settings=RepoSettings.from_documents(data, data.get("repoSettings")),
            extra={k: v for k, v in data.items() if k not in cls._KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "repoType": self.settings.repo_type.value,
            "repoPush": self.settings.push_commands,
            "repoSettings": self.settings.to_dict(),
        }
        document.update(self.extra)
        return document


@dataclass
class WorkingConfig:
    """Projection of the authoritative settings onto the active repository."""

    repo_type: RepoType
    repo_push: str
    repo_root: Path

    @classmethod
    def project(cls, settings: RepoSettings, repo_root: Path) -> "WorkingConfig":
        return cls(
            repo_type=settings.repo_type,
            repo_push=settings.push_commands,
            repo_root=repo_root,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkingConfig":
        return cls(
            repo_type=RepoType(data["repoType"]),
            repo_push=_commands(data.get("repoPush")),
            repo_root=Path(data["repoRoot"]),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "repoType": self.repo_type.value,
            "repoPush": self.repo_push,
            "repoRoot": str(self.repo_root),
        }


def _parse(path: Path, parser, document: dict[str, Any]):
    try:
        return parser(document)
    except KeyError as e:
        raise ConfigParseError(path, f"missing field {e}") from e
    except ValueError as e:
        raise ConfigParseError(path, str(e)) from e


@dataclass
class ConfigPaths:
    """
    Locations of the configuration documents.

    Instance and working configs live in `config_dir` (the invocation
    directory); the host config lives in the host repository root.
    """

    config_dir: Path = field(default_factory=Path.cwd)

    @property
    def instance_file(self) -> Path:
        return self.config_dir / INSTANCE_CONFIG_NAME

    @property
    def working_file(self) -> Path:
        return self.config_dir / WORKING_CONFIG_NAME

    @staticmethod
    def host_file(host_root: Path) -> Path:
        return host_root / HOST_CONFIG_NAME

    def load_instance(self) -> InstanceConfig:
        path = self.instance_file
        return _parse(path, InstanceConfig.from_dict, load_json(path))

    def save_instance(self, config: InstanceConfig) -> None:
        save_json(self.instance_file, config.to_dict())

    def load_host(self, host_root: Path) -> HostConfig:
        path = self.host_file(host_root)
        return _parse(path, HostConfig.from_dict, load_json(path))

    def save_host(self, host_root: Path, config: HostConfig) -> None:
        save_json(self.host_file(host_root), config.to_dict())

    def load_working(self) -> WorkingConfig:
        path = self.working_file
        return _parse(path, WorkingConfig.from_dict, load_json(path))

    def save_working(self, config: WorkingConfig) -> None:
        save_json(self.working_file, config.to_dict())

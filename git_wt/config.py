"""Configuration handling for git-wt"""

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Optional, Union

from git_wt.constants import CONFIG_FILE_NAME
from git_wt.exceptions import ConfigError
from git_wt.models.repository import RepositoryContext
from git_wt.models.worktree import WorktreeRecord
from git_wt.logging_config import get_logger

logger = get_logger(__name__)

# On-disk key -> Settings attribute
CONFIG_KEYS = {
    "worktreeDir": "worktree_directory",
    "autoFetch": "auto_fetch",
    "confirmDelete": "confirm_before_delete",
    "defaultBranch": "default_branch_name",
    "hooks.postCreate": "post_create_hook",
    "hooks.postRemove": "post_remove_hook",
}

BOOLEAN_KEYS = {"autoFetch", "confirmDelete"}
HOOK_KEYS = {"hooks.postCreate", "hooks.postRemove"}

TRUE_VALUES = {"true", "yes", "1", "on"}
FALSE_VALUES = {"false", "no", "0", "off"}


@dataclass(frozen=True)
class Settings:
    """Per-repository settings, validated on construction."""

    worktree_directory: str = "./"  # Relative to the repository root
    auto_fetch: bool = True
    confirm_before_delete: bool = False
    default_branch_name: str = "main"
    post_create_hook: Optional[str] = None
    post_remove_hook: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_worktree_directory()
        self._validate_booleans()
        self._validate_default_branch()
        self._validate_hooks()

    def _validate_worktree_directory(self):
        if not isinstance(self.worktree_directory, str) or not self.worktree_directory.strip():
            raise ConfigError("worktreeDir must be a non-empty string")

    def _validate_booleans(self):
        if not isinstance(self.auto_fetch, bool):
            raise ConfigError("autoFetch must be a boolean")
        if not isinstance(self.confirm_before_delete, bool):
            raise ConfigError("confirmDelete must be a boolean")

    def _validate_default_branch(self):
        if not isinstance(self.default_branch_name, str) or not self.default_branch_name.strip():
            raise ConfigError("defaultBranch must be a non-empty string")

    def _validate_hooks(self):
        for key, value in (("postCreate", self.post_create_hook), ("postRemove", self.post_remove_hook)):
            if value is not None and not isinstance(value, str):
                raise ConfigError(f"hooks.{key} must be a string or null")

    def worktree_base(self, context: RepositoryContext) -> Path:
        """Absolute directory new worktrees are created under."""
        return Path(os.path.normpath(context.root_dir / self.worktree_directory))

    def worktree_path(self, context: RepositoryContext, branch_name: str) -> Path:
        """Absolute directory for the worktree of `branch_name`."""
        return self.worktree_base(context) / branch_name

    def to_dict(self) -> dict:
        """Convert settings to the on-disk JSON shape."""
        return {
            "worktreeDir": self.worktree_directory,
            "autoFetch": self.auto_fetch,
            "confirmDelete": self.confirm_before_delete,
            "hooks": {
                "postCreate": self.post_create_hook,
                "postRemove": self.post_remove_hook,
            },
            "defaultBranch": self.default_branch_name,
        }

    @classmethod
    def from_dict(cls, data: dict, base: Optional["Settings"] = None) -> "Settings":
        """Build settings from the on-disk JSON shape.

        Absent keys keep the value from `base` (or the defaults); unknown keys
        are ignored.
        """
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a JSON object")

        values = {}
        for key in ("worktreeDir", "autoFetch", "confirmDelete", "defaultBranch"):
            if key in data:
                values[CONFIG_KEYS[key]] = data[key]

        hooks = data.get("hooks")
        if hooks is not None:
            if not isinstance(hooks, dict):
                raise ConfigError("hooks must be an object")
            for hook_key in ("postCreate", "postRemove"):
                if hook_key in hooks:
                    values[CONFIG_KEYS[f"hooks.{hook_key}"]] = hooks[hook_key]

        return replace(base or cls(), **values)


def parse_config_value(key: str, raw_value: Optional[str]) -> Union[str, bool, None]:
    """Parse a command-line string into the type expected for `key`."""
    if key not in CONFIG_KEYS:
        raise ConfigError(f"Invalid configuration key: {key}. Valid keys: {', '.join(CONFIG_KEYS)}")

    if key in BOOLEAN_KEYS:
        lowered = (raw_value or "").strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
        raise ConfigError(f"{key} must be a boolean (true/false), got '{raw_value}'")

    if key in HOOK_KEYS:
        if raw_value is None or raw_value.strip().lower() in ("", "null", "none"):
            return None
        return raw_value

    if raw_value is None:
        raise ConfigError(f"{key} requires a value")
    return raw_value


class ConfigStore:
    """Loads and saves Settings as .wtconfig.json at the repository root."""

    def config_path(self, context: RepositoryContext) -> Path:
        return context.root_dir / CONFIG_FILE_NAME

    def exists(self, context: RepositoryContext) -> bool:
        return self.config_path(context).is_file()

    def load(self, context: RepositoryContext, defaults: Optional[Settings] = None) -> Settings:
        """Load settings, filling absent fields from `defaults`.

        Raises:
            ConfigError: If the file cannot be read, is not valid JSON or
                holds values of the wrong type
        """
        path = self.config_path(context)
        if not path.exists():
            logger.debug(f"No config file at {path}, using defaults")
            return defaults or Settings()

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file {path}: {e}")

        settings = Settings.from_dict(data, base=defaults)
        logger.debug(f"Loaded settings from {path}: {settings}")
        return settings

    def save(self, context: RepositoryContext, settings: Settings) -> None:
        """Write the whole settings object.

        Raises:
            ConfigError: If the file cannot be written
        """
        path = self.config_path(context)
        try:
            path.write_text(json.dumps(settings.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to save config file {path}: {e}")
        logger.info(f"Saved settings to {path}")

    def set_value(
        self,
        context: RepositoryContext,
        key: str,
        raw_value: Optional[str],
        defaults: Optional[Settings] = None,
    ) -> Settings:
        """Update one key, re-validate and rewrite the file.

        Returns:
            The updated Settings
        """
        value = parse_config_value(key, raw_value)
        current = self.load(context, defaults)
        updated = replace(current, **{CONFIG_KEYS[key]: value})
        self.save(context, updated)
        return updated

    @staticmethod
    def get_value(settings: Settings, key: str) -> Union[str, bool, None]:
        """Get a value by its on-disk key (e.g. "hooks.postCreate")."""
        if key not in CONFIG_KEYS:
            raise ConfigError(f"Invalid configuration key: {key}. Valid keys: {', '.join(CONFIG_KEYS)}")
        return getattr(settings, CONFIG_KEYS[key])


def detect_defaults(
    context: RepositoryContext,
    worktrees: Iterable[WorktreeRecord],
    remote_default_branch: Optional[str] = None,
) -> Settings:
    """Derive default settings from the repository's existing worktrees.

    The worktree directory becomes the common parent of the linked worktrees
    (everything after the first, main entry, ignoring bare entries). The
    default branch is taken from the remote's HEAD when known.
    """
    defaults = Settings()
    records = list(worktrees)

    parents = [str(Path(wt.path).parent) for wt in records[1:] if not wt.is_bare]
    worktree_directory = defaults.worktree_directory
    if parents:
        common = os.path.commonpath(parents)
        relative = os.path.relpath(common, context.root_dir)
        if relative == ".":
            worktree_directory = "./"
        elif relative.startswith(".."):
            worktree_directory = relative
        else:
            worktree_directory = f"./{relative}"
        logger.debug(f"Detected worktree directory {worktree_directory} from {len(parents)} worktrees")

    return replace(
        defaults,
        worktree_directory=worktree_directory,
        default_branch_name=remote_default_branch or defaults.default_branch_name,
    )

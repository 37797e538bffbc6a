"""Agent kinds, scopes and resolution of the directories skills are linked into."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath
from typing import Union

__all__ = [
    "Scope",
    "AgentKind",
    "CustomAgent",
    "BuiltinAgentMappingError",
    "MissingCustomTargetError",
    "ProjectTargetEscapesRootError",
    "TargetPathResolver",
    "default_target_dir",
]


class Scope(Enum):
    """Where an agent's skills live: in the user's home or inside a project."""

    USER = "user"
    PROJECT = "project"


class AgentKind(Enum):
    """Agents whose skill directories are known without configuration."""

    PI = "pi"
    CLAUDE_CODE = "claude-code"
    CODEX = "codex"
    GEMINI = "gemini"
    OPENCODE = "opencode"


@dataclass(frozen=True)
class CustomAgent:
    """A user-defined agent; its target directory must always be given."""

    name: str


Agent = Union[AgentKind, CustomAgent]


class BuiltinAgentMappingError(ValueError):
    """Raised when an agent's target directory cannot be resolved."""


class MissingCustomTargetError(BuiltinAgentMappingError):
    """A custom agent was resolved without a targetDir override."""

    def __init__(self, name: str) -> None:
        super().__init__(f"custom agent '{name}' requires targetDir override")
        self.name = name


class ProjectTargetEscapesRootError(BuiltinAgentMappingError):
    """A project-scope targetDir points outside the project root."""

    def __init__(self, target: str) -> None:
        super().__init__(
            f"project targetDir '{target}' must be a relative path inside the project root"
        )
        self.target = target


_DEFAULT_TARGETS: dict[tuple[AgentKind, Scope], str] = {
    (AgentKind.PI, Scope.USER): "~/.pi/agent/skills",
    (AgentKind.PI, Scope.PROJECT): ".pi/agent/skills",
    (AgentKind.CLAUDE_CODE, Scope.USER): "~/.claude/skills",
    (AgentKind.CLAUDE_CODE, Scope.PROJECT): ".claude/skills",
    (AgentKind.CODEX, Scope.USER): "~/.codex/skills",
    (AgentKind.CODEX, Scope.PROJECT): ".codex/skills",
    (AgentKind.GEMINI, Scope.USER): "~/.gemini/skills",
    (AgentKind.GEMINI, Scope.PROJECT): ".gemini/skills",
    (AgentKind.OPENCODE, Scope.USER): "~/.config/opencode/skills",
    (AgentKind.OPENCODE, Scope.PROJECT): ".opencode/skills",
}


def default_target_dir(agent: Agent, scope: Scope) -> Path:
    """Return the unexpanded default skill directory for a built-in agent."""
    if isinstance(agent, CustomAgent):
        raise MissingCustomTargetError(agent.name)
    return Path(_DEFAULT_TARGETS[(agent, scope)])


def _starts_with_home(path: PurePath) -> bool:
    return bool(path.parts) and path.parts[0] == "~"


def _is_safe_project_relative_path(raw: str) -> bool:
    if raw == "":
        return False
    path = PurePath(raw)
    return (
        not path.is_absolute()
        and not _starts_with_home(path)
        and ".." not in path.parts
    )


class TargetPathResolver:
    """Turns an agent and scope into an absolute skill target directory."""

    def __init__(self, project_root, home_dir) -> None:
        self.project_root = Path(project_root)
        self.home_dir = Path(home_dir)

    def __repr__(self) -> str:
        return (
            f"TargetPathResolver(project_root={self.project_root!r}, "
            f"home_dir={self.home_dir!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TargetPathResolver):
            return NotImplemented
        return (self.project_root, self.home_dir) == (other.project_root, other.home_dir)

    def __hash__(self) -> int:
        return hash((self.project_root, self.home_dir))

    def resolve(self, agent: Agent, scope: Scope, target_dir_override=None) -> Path:
        """Resolve the target directory, using the override when given."""
        if target_dir_override is not None:
            raw = os.fspath(target_dir_override)
        else:
            raw = os.fspath(default_target_dir(agent, scope))

        if scope is Scope.PROJECT:
            if not _is_safe_project_relative_path(raw):
                raise ProjectTargetEscapesRootError(raw)
            return self.project_root / raw

        path = Path(raw)
        if _starts_with_home(path):
            return self.home_dir.joinpath(*path.parts[1:])
        return path
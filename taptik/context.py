# Taptik Configuration Context
# Platform identifiers and traversal helpers shared by every pipeline stage

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

# Weakly typed configuration tree as produced by the collectors
JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]

COMPONENT_KINDS = ("agents", "commands", "mcpServers", "steeringRules", "instructions")


class Platform(str, Enum):
    """Supported IDE platforms."""

    CLAUDE_CODE = "claude-code"
    KIRO_IDE = "kiro-ide"
    CURSOR_IDE = "cursor-ide"

    @property
    def data_key(self) -> str:
        """Key of this platform's section inside ``context["data"]``."""
        return _DATA_KEYS[self]

    @property
    def display_name(self) -> str:
        """Human-readable platform name."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: Any) -> Platform | None:
        """Return the platform for an identifier or None if unknown."""
        if isinstance(value, Platform):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def from_data_key(cls, key: str) -> Platform | None:
        """Return the platform owning a data section key."""
        for platform, data_key in _DATA_KEYS.items():
            if data_key == key:
                return platform
        return None


_DATA_KEYS = {
    Platform.CLAUDE_CODE: "claudeCode",
    Platform.KIRO_IDE: "kiroIde",
    Platform.CURSOR_IDE: "cursorIde",
}

_DISPLAY_NAMES = {
    Platform.CLAUDE_CODE: "Claude Code",
    Platform.KIRO_IDE: "Kiro IDE",
    Platform.CURSOR_IDE: "Cursor IDE",
}


def as_dict(value: Any) -> dict[str, Any]:
    """Return value if it is a dict, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    """Return value if it is a list, otherwise an empty list."""
    return value if isinstance(value, list) else []


def is_empty(value: Any) -> bool:
    """Check whether a configuration value carries no content."""
    if value is None:
        return True
    if isinstance(value, (str, list, dict)):
        return len(value) == 0
    return False


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def platform_section(context: dict[str, Any], platform: Platform) -> dict[str, Any]:
    """Get the data section of a platform, or an empty dict."""
    return as_dict(as_dict(context.get("data")).get(platform.data_key))


def iter_scopes(context: dict[str, Any]) -> Iterator[tuple[Platform, str, dict[str, Any]]]:
    """
    Iterate over every scope of every known platform section.

    A scope is a top-level dict inside a platform section, usually
    ``local`` and ``global``.

    Yields:
        Tuples of (platform, scope name, scope dict).
    """
    data = as_dict(context.get("data"))
    for platform in Platform:
        section = as_dict(data.get(platform.data_key))
        for scope_name, scope in section.items():
            if isinstance(scope, dict):
                yield platform, scope_name, scope


def populated_platforms(context: dict[str, Any]) -> list[Platform]:
    """Platforms whose data section has at least one non-empty scope."""
    found: list[Platform] = []
    for platform, _, scope in iter_scopes(context):
        if platform not in found and any(not is_empty(v) for v in scope.values()):
            found.append(platform)
    return found


def detect_source_platform(context: dict[str, Any]) -> Platform | None:
    """
    Determine which platform a context was collected from.

    Checks ``metadata.platforms`` first, then the declared ``sourceIde`` if its
    section is populated, then the first populated platform section.

    Args:
        context: Configuration context.

    Returns:
        Detected platform or None if it cannot be determined.
    """
    platforms = as_list(as_dict(context.get("metadata")).get("platforms"))
    if platforms:
        platform = Platform.parse(platforms[0])
        if platform is not None:
            return platform

    populated = populated_platforms(context)
    declared = Platform.parse(context.get("sourceIde"))
    if declared is not None and declared in populated:
        return declared
    return populated[0] if populated else None


def scope_records(scope: dict[str, Any], kind: str) -> list[dict[str, Any]]:
    """
    Collect the records of one component kind from a scope.

    Platform spellings are folded together: Kiro hooks count as commands,
    Cursor rules as steering rules, and MCP servers may be given either as
    ``{"servers": [...]}`` or as a bare list.

    Args:
        scope: Scope dict.
        kind: One of agents, commands, mcpServers, steeringRules.

    Returns:
        List of record dicts.
    """
    if kind == "mcpServers":
        servers = scope.get("mcpServers")
        if isinstance(servers, dict):
            servers = servers.get("servers")
        return [s for s in as_list(servers) if isinstance(s, dict)]

    keys = {
        "agents": ("agents",),
        "commands": ("commands", "hooks"),
        "steeringRules": ("steeringRules", "rules"),
    }.get(kind, ())
    records: list[dict[str, Any]] = []
    for key in keys:
        records.extend(r for r in as_list(scope.get(key)) if isinstance(r, dict))
    return records


def instruction_sections(scope: dict[str, Any]) -> list[str]:
    """
    Collect free-text instruction sections from a scope.

    Claude Code keeps ``instructions.global`` and ``instructions.local``;
    Kiro specs contribute one section each.
    """
    sections: list[str] = []
    instructions = as_dict(scope.get("instructions"))
    for key in ("global", "local"):
        text = instructions.get(key)
        if isinstance(text, str) and text.strip():
            sections.append(text)
    for spec in as_list(scope.get("specs")):
        if isinstance(spec, dict) and isinstance(spec.get("content"), str) and spec["content"].strip():
            sections.append(spec["content"])
    return sections

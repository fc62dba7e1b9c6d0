# Taptik Platform Converters
# Per-pair strategies that reshape one platform section into another

from __future__ import annotations

import copy
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from taptik.context import Platform, as_dict, as_list, is_empty, scope_records


class Confidence(str, Enum):
    """How faithfully an approximation preserves the source feature."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Approximation:
    """A target feature substituted for a source feature the target lacks."""

    source_feature: str
    target_feature: str
    confidence: Confidence
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "sourceFeature": self.source_feature,
            "targetFeature": self.target_feature,
            "confidence": self.confidence.value,
        }
        if self.note:
            data["note"] = self.note
        return data


@dataclass
class FeatureMapping:
    """Static description of what a converter maps and how."""

    direct: dict[str, str] = field(default_factory=dict)
    approximations: list[Approximation] = field(default_factory=list)
    unsupported: list[str] = field(default_factory=list)


@dataclass
class ConverterOutput:
    """Converted platform section plus the converter's own analysis."""

    data: dict[str, Any] = field(default_factory=dict)
    approximations: list[Approximation] = field(default_factory=list)
    unsupported_features: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def approximate(self, approximation: Approximation) -> None:
        if approximation not in self.approximations:
            self.approximations.append(approximation)

    def unsupported(self, feature: str) -> None:
        if feature not in self.unsupported_features:
            self.unsupported_features.append(feature)


class BaseConverter(ABC):
    """
    Converts a source platform's data section into a target platform's shape.

    Converters work scope by scope (``local``, ``global``) and never modify
    their input.
    """

    source: Platform
    target: Platform
    mapping: FeatureMapping

    def convert(self, section: dict[str, Any]) -> ConverterOutput:
        """
        Convert a platform section.

        Args:
            section: Source platform section keyed by scope name.

        Returns:
            ConverterOutput with the target section.
        """
        output = ConverterOutput()
        for scope_name, scope in section.items():
            if not isinstance(scope, dict):
                continue
            converted = self.convert_scope(copy.deepcopy(scope), output)
            output.data[scope_name] = {k: v for k, v in converted.items() if not is_empty(v)}
        return output

    @abstractmethod
    def convert_scope(self, scope: dict[str, Any], output: ConverterOutput) -> dict[str, Any]:
        """Convert one scope, recording approximations and losses on output."""

    def _approximation(self, source_feature: str) -> Approximation:
        for approximation in self.mapping.approximations:
            if approximation.source_feature == source_feature:
                return approximation
        raise KeyError(source_feature)

    def _filter_settings(self, settings: Any, output: ConverterOutput) -> dict[str, Any]:
        filtered = {}
        for key, value in as_dict(settings).items():
            if key in self.mapping.unsupported:
                output.unsupported(key)
            else:
                filtered[key] = value
        return filtered


def split_markdown_sections(text: str) -> list[tuple[str, str]]:
    """
    Split markdown into (heading, body) pairs on level-two headings.

    Text before the first heading becomes a section named ``general``.
    """
    sections: list[tuple[str, str]] = []
    heading = "general"
    lines: list[str] = []
    for line in text.splitlines():
        if line.startswith("## "):
            if "\n".join(lines).strip():
                sections.append((heading, "\n".join(lines).strip()))
            heading = line[3:].strip() or "general"
            lines = []
        else:
            lines.append(line)
    if "\n".join(lines).strip():
        sections.append((heading, "\n".join(lines).strip()))
    return sections


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "section"


def command_line(command: dict[str, Any]) -> str:
    parts = [str(command.get("command") or "")]
    parts.extend(str(arg) for arg in as_list(command.get("args")))
    return " ".join(p for p in parts if p)


class ClaudeToKiroConverter(BaseConverter):
    """Claude Code to Kiro."""

    source = Platform.CLAUDE_CODE
    target = Platform.KIRO_IDE
    mapping = FeatureMapping(
        direct={"settings": "settings", "mcpServers": "mcpServers", "steeringRules": "steeringRules"},
        approximations=[
            Approximation("instructions.global", "specs", Confidence.HIGH, "CLAUDE.md converted to Kiro specs"),
            Approximation(
                "instructions.local", "steeringRules", Confidence.HIGH, "CLAUDE.local.md split into steering rules"
            ),
            Approximation("commands", "hooks", Confidence.MEDIUM, "Commands converted to manually triggered hooks"),
            Approximation(
                "agents", "steeringRules", Confidence.LOW, "Agent prompts kept as steering rules; tool lists dropped"
            ),
        ],
        unsupported=["permissions", "env", "statusLine"],
    )

    def convert_scope(self, scope: dict[str, Any], output: ConverterOutput) -> dict[str, Any]:
        result: dict[str, Any] = {
            "settings": self._filter_settings(scope.get("settings"), output),
            "mcpServers": scope.get("mcpServers"),
            "steeringRules": [dict(rule) for rule in scope_records(scope, "steeringRules")],
            "specs": [],
            "hooks": [],
        }

        instructions = as_dict(scope.get("instructions"))
        if isinstance(instructions.get("global"), str) and instructions["global"].strip():
            result["specs"].append({"name": "project-instructions", "content": instructions["global"]})
            output.approximate(self._approximation("instructions.global"))
        if isinstance(instructions.get("local"), str) and instructions["local"].strip():
            for heading, body in split_markdown_sections(instructions["local"]):
                result["steeringRules"].append({"name": slugify(heading), "pattern": "**/*", "rule": body})
            output.approximate(self._approximation("instructions.local"))

        commands = scope_records(scope, "commands")
        for command in commands:
            result["hooks"].append(
                {
                    "name": command.get("name"),
                    "enabled": True,
                    "description": command.get("description") or f"Converted from command {command.get('name')}",
                    "version": "1.0.0",
                    "when": {"type": "manual", "patterns": []},
                    "then": {"type": "command", "command": command_line(command)},
                }
            )
        if commands:
            output.approximate(self._approximation("commands"))

        agents = scope_records(scope, "agents")
        for agent in agents:
            prompt = agent.get("prompt") or agent.get("instructions") or ""
            result["steeringRules"].append({"name": agent.get("name"), "pattern": "**/*", "rule": prompt})
        if agents:
            output.approximate(self._approximation("agents"))
            if any(agent.get("tools") for agent in agents):
                output.warnings.append("Agent tool restrictions are not supported in Kiro and were dropped")

        return result


class KiroToClaudeConverter(BaseConverter):
    """Kiro to Claude Code."""

    source = Platform.KIRO_IDE
    target = Platform.CLAUDE_CODE
    mapping = FeatureMapping(
        direct={"settings": "settings", "mcpServers": "mcpServers", "steeringRules": "steeringRules"},
        approximations=[
            Approximation("specs", "instructions.global", Confidence.HIGH, "Kiro specs merged into CLAUDE.md"),
            Approximation("hooks", "commands", Confidence.MEDIUM, "Hooks converted to custom commands; triggers dropped"),
        ],
        unsupported=["taskTemplates"],
    )

    def convert_scope(self, scope: dict[str, Any], output: ConverterOutput) -> dict[str, Any]:
        if scope.get("taskTemplates"):
            output.unsupported("taskTemplates")

        result: dict[str, Any] = {
            "settings": as_dict(scope.get("settings")),
            "mcpServers": scope.get("mcpServers"),
            "steeringRules": [
                {"pattern": r.get("pattern") or "**/*", "rule": r.get("rule") or r.get("content")}
                for r in as_list(scope.get("steeringRules"))
                if isinstance(r, dict)
            ],
            "commands": [],
            "instructions": {},
        }

        specs = [s for s in as_list(scope.get("specs")) if isinstance(s, dict) and s.get("content")]
        if specs:
            result["instructions"]["global"] = "\n\n".join(
                f"# {spec.get('name') or 'Specification'}\n\n{spec['content']}" for spec in specs
            )
            output.approximate(self._approximation("specs"))

        hooks = [h for h in as_list(scope.get("hooks")) if isinstance(h, dict)]
        for hook in hooks:
            action = as_dict(hook.get("then"))
            text = action.get("command") or action.get("prompt")
            if not text:
                output.warnings.append(f"Hook '{hook.get('name')}' has no command and was skipped")
                continue
            result["commands"].append(
                {"name": hook.get("name"), "command": text, "description": hook.get("description") or ""}
            )
        if hooks:
            output.approximate(self._approximation("hooks"))

        return result


class ClaudeToCursorConverter(BaseConverter):
    """Claude Code to Cursor."""

    source = Platform.CLAUDE_CODE
    target = Platform.CURSOR_IDE
    mapping = FeatureMapping(
        direct={"settings": "settings", "mcpServers": "mcpServers"},
        approximations=[
            Approximation("steeringRules", "rules", Confidence.HIGH, "Steering rules become glob-scoped Cursor rules"),
            Approximation("instructions", "rules", Confidence.MEDIUM, "Instructions become always-applied rules"),
            Approximation("agents", "rules", Confidence.LOW, "Agent prompts kept as rules; agents cannot be invoked"),
        ],
        unsupported=["commands", "permissions"],
    )

    def convert_scope(self, scope: dict[str, Any], output: ConverterOutput) -> dict[str, Any]:
        rules: list[dict[str, Any]] = []

        steering = scope_records(scope, "steeringRules")
        for index, rule in enumerate(steering, start=1):
            rules.append(
                {
                    "name": rule.get("name") or f"steering-rule-{index}",
                    "globs": rule.get("pattern") or "",
                    "alwaysApply": False,
                    "content": rule.get("rule") or "",
                }
            )
        if steering:
            output.approximate(self._approximation("steeringRules"))

        instructions = as_dict(scope.get("instructions"))
        texts = [(k, v) for k, v in instructions.items() if isinstance(v, str) and v.strip()]
        for key, text in texts:
            rules.append({"name": f"{key}-instructions", "globs": "", "alwaysApply": True, "content": text})
        if texts:
            output.approximate(self._approximation("instructions"))

        agents = scope_records(scope, "agents")
        for agent in agents:
            rules.append(
                {
                    "name": agent.get("name"),
                    "globs": "",
                    "alwaysApply": False,
                    "content": agent.get("prompt") or agent.get("instructions") or "",
                }
            )
        if agents:
            output.approximate(self._approximation("agents"))

        commands = scope_records(scope, "commands")
        if commands:
            output.unsupported("commands")
            output.warnings.append(f"Cursor has no custom command equivalent; {len(commands)} command(s) dropped")

        return {
            "settings": self._filter_settings(scope.get("settings"), output),
            "mcpServers": scope.get("mcpServers"),
            "rules": rules,
        }


DEFAULT_CONVERTERS: tuple[type[BaseConverter], ...] = (
    ClaudeToKiroConverter,
    KiroToClaudeConverter,
    ClaudeToCursorConverter,
)

# Taptik Metadata Generator
# Derives tags, keywords, features and complexity from a configuration context

from __future__ import annotations

import logging
from typing import Any

from taptik.context import (
    Platform,
    as_dict,
    as_list,
    instruction_sections,
    is_empty,
    iter_scopes,
    scope_records,
    utc_now_iso,
)
from taptik.metadata.models import PLACEHOLDER_CHECKSUM, CloudMetadata, ComplexityLevel, ComponentCount
from taptik.metadata.vocabulary import (
    COMMAND_FEATURES,
    FEATURE_NAMES,
    HIGHLIGHT_FEATURES,
    MAX_DESCRIPTION_LENGTH,
    MAX_KEYWORDS,
    STACK_SIDES,
    STOP_WORDS,
    TECHNOLOGIES,
    detect_technologies,
    tokenize,
)

logger = logging.getLogger(__name__)


class MetadataGenerator:
    """
    Generates descriptive cloud metadata for a configuration context.

    All derivations are heuristic and never raise for malformed content;
    missing or oddly shaped sections simply contribute nothing.
    """

    def generate(self, context: dict[str, Any]) -> CloudMetadata:
        """
        Generate metadata for a context.

        Args:
            context: Configuration context.

        Returns:
            CloudMetadata with a placeholder checksum.
        """
        source = str(context.get("sourceIde") or Platform.CLAUDE_CODE.value)
        declared_targets = [str(t) for t in as_list(context.get("targetIdes"))]
        version = str(context.get("version") or "1.0.0")
        context_meta = as_dict(context.get("metadata"))

        counts = self.count_components(context)
        features = self.detect_features(context, counts)
        tags = self.generate_tags(context, counts, features)
        keywords = self.generate_keywords(context, tags)

        metadata = CloudMetadata(
            title=self.generate_title(source),
            description=self.generate_description(counts, features),
            source_ide=source,
            target_ides=declared_targets or [source],
            tags=_sorted_unique(tags),
            search_keywords=keywords,
            component_count=counts,
            complexity_level=ComplexityLevel.from_total(counts.total),
            features=_sorted_unique(features),
            compatibility=_sorted_unique(self.detect_compatibility(source, declared_targets, version, counts, tags)),
            version=version,
            author=str(context_meta.get("exportedBy") or "unknown"),
            created_at=str(context_meta.get("timestamp") or utc_now_iso()),
            file_size=0,
            checksum=PLACEHOLDER_CHECKSUM,
        )

        logger.debug(
            "Generated metadata: %d components (%s), %d tags, %d keywords",
            counts.total,
            metadata.complexity_level.value,
            len(metadata.tags),
            len(metadata.search_keywords),
        )
        return metadata

    def count_components(self, context: dict[str, Any]) -> ComponentCount:
        """Sum component counts over every scope of every platform section."""
        counts = ComponentCount()
        for _, _, scope in iter_scopes(context):
            counts.agents += len(scope_records(scope, "agents"))
            counts.commands += len(scope_records(scope, "commands"))
            counts.mcp_servers += len(scope_records(scope, "mcpServers"))
            counts.steering_rules += len(scope_records(scope, "steeringRules"))
            counts.instructions += len(instruction_sections(scope))
        return counts

    def generate_title(self, source: str) -> str:
        platform = Platform.parse(source) or Platform.CLAUDE_CODE
        return f"{platform.display_name} Configuration"

    def generate_description(self, counts: ComponentCount, features: list[str]) -> str:
        """Summarize component counts and highlighted features."""
        parts = []
        for count, noun in (
            (counts.agents, "agent"),
            (counts.commands, "command"),
            (counts.mcp_servers, "MCP server"),
            (counts.steering_rules, "steering rule"),
            (counts.instructions, "instruction"),
        ):
            if count > 0:
                parts.append(f"{count} {noun}{'s' if count > 1 else ''}")

        if not parts:
            return "Basic configuration settings"

        description = f"Configuration with {', '.join(parts)}"
        highlights = [f for f in HIGHLIGHT_FEATURES if f in features]
        if highlights:
            description += f". Features: {', '.join(highlights)}"

        if len(description) > MAX_DESCRIPTION_LENGTH:
            description = f"{description[: MAX_DESCRIPTION_LENGTH - 3]}..."
        return description

    def detect_features(self, context: dict[str, Any], counts: ComponentCount) -> list[str]:
        """
        Detect features from settings flags, components and commands.

        Args:
            context: Configuration context.
            counts: Precomputed component counts.

        Returns:
            Feature names in discovery order.
        """
        features: list[str] = []

        for _, _, scope in iter_scopes(context):
            flags = as_dict(as_dict(scope.get("settings")).get("features"))
            for flag, enabled in flags.items():
                name = FEATURE_NAMES.get(flag)
                if enabled is True and name:
                    features.append(name)

        if counts.mcp_servers > 0:
            features.append("mcp-servers")
        if counts.agents > 0:
            features.append("custom-agents")

        for command in self._command_texts(context):
            lowered = command.lower()
            features.extend(name for name, pattern in COMMAND_FEATURES if pattern.search(lowered))

        return _unique(features)

    def generate_tags(self, context: dict[str, Any], counts: ComponentCount, features: list[str]) -> list[str]:
        """
        Assemble tags from platforms, components, features, technologies and workflows.

        Returns:
            Tags in discovery order (not yet sorted).
        """
        tags: list[str] = []

        source = context.get("sourceIde")
        if source:
            tags.append(str(source))
        targets = [str(t) for t in as_list(context.get("targetIdes"))]
        tags.extend(targets)
        if len(targets) > 1:
            tags.append("multi-ide")

        if counts.agents > 0:
            tags.append("custom-agents")
        if counts.mcp_servers > 0:
            tags.append("mcp-enabled")
        if counts.steering_rules > 0:
            tags.append("custom-rules")
        if counts.instructions > 0:
            tags.append("guided-development")

        tags.extend(features)
        tags.extend(self._technology_tags(context))
        tags.extend(self._workflow_tags(context, tags))

        if any(scope_name == "global" and not is_empty(scope) for _, scope_name, scope in iter_scopes(context)):
            tags.append("global-settings")

        return _unique(tags)

    def generate_keywords(self, context: dict[str, Any], tags: list[str]) -> list[str]:
        """
        Produce search keywords.

        Starts from the source platform, ``configuration`` and every tag, then
        tokenizes agent, command, instruction and steering-rule text.

        Returns:
            Sorted, deduplicated, lowercase keywords (at most 50).
        """
        keywords: list[str] = [str(context.get("sourceIde") or Platform.CLAUDE_CODE.value), "configuration"]
        keywords.extend(tags)

        texts: list[str] = []
        for _, _, scope in iter_scopes(context):
            for agent in scope_records(scope, "agents"):
                texts.extend(_strings(agent.get("name"), agent.get("prompt") or agent.get("instructions")))
            for command in scope_records(scope, "commands"):
                texts.extend(_strings(command.get("name")))
                keywords.extend(detect_technologies(_command_text(command)))
            for rule in scope_records(scope, "steeringRules"):
                texts.extend(_strings(rule.get("rule") or rule.get("content")))
            texts.extend(instruction_sections(scope))

        for text in texts:
            keywords.extend(self._text_keywords(text))

        normalized = {k.strip().lower() for k in keywords if isinstance(k, str)}
        return sorted(k for k in normalized if len(k) > 2)[:MAX_KEYWORDS]

    def detect_compatibility(
        self,
        source: str,
        targets: list[str],
        version: str,
        counts: ComponentCount,
        tags: list[str],
    ) -> list[str]:
        """Combine platform identifiers with derived compatibility hints."""
        compatibility = [source, *targets]
        if counts.mcp_servers > 0:
            compatibility.append("mcp-compatible")
        if "docker" in tags or "kubernetes" in tags:
            compatibility.append("container-ready")
        major = version.split(".")[0]
        if major != "1":
            compatibility.append(f"v{major}-compatible")
        return _unique(compatibility)

    def _text_keywords(self, text: str) -> list[str]:
        lowered = text.lower()
        words: list[str] = []
        if "node.js" in lowered or "nodejs" in lowered:
            words.append("nodejs")
        if "solid" in lowered and "principles" in lowered:
            words.append("solid-principles")

        for token in tokenize(lowered):
            if len(token) <= 2:
                continue
            if token in TECHNOLOGIES:
                words.append(TECHNOLOGIES[token])
            elif token not in STOP_WORDS and not token.isdigit():
                words.append(token)
        return words

    def _technology_tags(self, context: dict[str, Any]) -> list[str]:
        technologies: set[str] = set()
        for _, _, scope in iter_scopes(context):
            for rule in scope_records(scope, "steeringRules"):
                for text in _strings(rule.get("rule") or rule.get("content")):
                    technologies |= detect_technologies(text)
            for command in scope_records(scope, "commands"):
                technologies |= detect_technologies(_command_text(command))

        tags = sorted(technologies)
        sides = {STACK_SIDES[t] for t in technologies if t in STACK_SIDES}
        tags.extend(sorted(sides))
        if {"frontend", "backend"} <= sides:
            tags.append("fullstack")
        return tags

    def _workflow_tags(self, context: dict[str, Any], tags: list[str]) -> list[str]:
        commands = [
            (str(c.get("name") or "").lower(), _command_text(c).lower())
            for _, _, scope in iter_scopes(context)
            for c in scope_records(scope, "commands")
        ]
        instructions = " ".join(
            text for _, _, scope in iter_scopes(context) for text in instruction_sections(scope)
        ).lower()

        workflow: list[str] = []
        if any("test" in name or "test" in body for name, body in commands) or "test" in instructions:
            workflow.append("testing")
            if any("coverage" in body for _, body in commands):
                workflow.append("code-quality")
            if "tdd" in instructions or ("test" in instructions and "first" in instructions):
                workflow.append("tdd")

        pipeline_words = {"ci", "cd", "deploy", "pipeline", "release"}
        if any(pipeline_words & set(tokenize(f"{name} {body}")) for name, body in commands):
            workflow.append("ci-cd")
            if any("deploy" in name or "deploy" in body for name, body in commands):
                workflow.append("automated-deployment")

        if any(word in body for _, body in commands for word in ("lint", "prettier", "format")):
            workflow.append("code-quality")

        if "docker" in tags or "kubernetes" in tags:
            workflow.append("devops")
        return workflow

    def _command_texts(self, context: dict[str, Any]) -> list[str]:
        return [
            _command_text(command)
            for _, _, scope in iter_scopes(context)
            for command in scope_records(scope, "commands")
        ]


def _command_text(command: dict[str, Any]) -> str:
    """Shell text of a command record (Kiro hooks keep it under ``then``)."""
    text = command.get("command")
    if not isinstance(text, str):
        text = as_dict(command.get("then")).get("command")
    parts = [text] if isinstance(text, str) else []
    parts.extend(str(a) for a in as_list(command.get("args")))
    return " ".join(parts)


def _strings(*values: Any) -> list[str]:
    return [v for v in values if isinstance(v, str) and v]


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _sorted_unique(items: list[str]) -> list[str]:
    return sorted(set(items))

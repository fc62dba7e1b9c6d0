# Tests for taptik.convert
# Converters, registry, engine and conversion reports

import copy

import pytest

from taptik.context import Platform
from taptik.convert.converters import (
    ClaudeToCursorConverter,
    ClaudeToKiroConverter,
    Confidence,
    split_markdown_sections,
)
from taptik.convert.engine import CompatibilityScore, ConversionEngine, ConversionOptions
from taptik.convert.registry import ConverterNotFound, ConverterRegistry
from taptik.convert.report import ConversionReport, data_loss_severity


class TestCompatibilityScore:
    """Tests for score computation."""

    def test_formula(self):
        score = CompatibilityScore.compute(direct=5, approximated=4, unsupported=1)
        assert score.score == 78
        assert score.total == 10
        assert score.rating == "good"
        assert not score.reversible

    def test_empty_is_zero(self):
        assert CompatibilityScore.compute(0, 0, 0).score == 0

    @pytest.mark.parametrize("value,rating", [(90, "excellent"), (89, "good"), (70, "good"), (50, "fair"), (49, "poor")])
    def test_ratings(self, value, rating):
        assert CompatibilityScore(score=value, direct=0, approximated=0, unsupported=0).rating == rating

    def test_reversible(self):
        assert CompatibilityScore.compute(direct=8, approximated=2, unsupported=0).reversible
        assert not CompatibilityScore.compute(direct=7, approximated=3, unsupported=0).reversible


class TestRegistry:
    """Tests for ConverterRegistry."""

    def test_defaults(self):
        registry = ConverterRegistry.with_defaults()
        assert registry.has_converter(Platform.CLAUDE_CODE, Platform.KIRO_IDE)
        assert registry.has_converter(Platform.KIRO_IDE, Platform.CLAUDE_CODE)
        assert registry.has_converter(Platform.CLAUDE_CODE, Platform.CURSOR_IDE)
        assert not registry.has_converter(Platform.CURSOR_IDE, Platform.CLAUDE_CODE)

    def test_missing_pair(self):
        found = ConverterRegistry.with_defaults().get(Platform.KIRO_IDE, Platform.CURSOR_IDE)
        assert isinstance(found, ConverterNotFound)
        assert found.message == "No converter available for kiro-ide to cursor-ide"

    def test_register_replaces(self):
        registry = ConverterRegistry()
        first, second = ClaudeToKiroConverter(), ClaudeToKiroConverter()
        registry.register(first)
        registry.register(second)
        assert registry.get(Platform.CLAUDE_CODE, Platform.KIRO_IDE) is second
        assert registry.pairs() == [(Platform.CLAUDE_CODE, Platform.KIRO_IDE)]

    def test_unregister(self):
        registry = ConverterRegistry([ClaudeToCursorConverter()])
        assert registry.unregister(Platform.CLAUDE_CODE, Platform.CURSOR_IDE)
        assert not registry.unregister(Platform.CLAUDE_CODE, Platform.CURSOR_IDE)

    def test_conversion_chain(self):
        registry = ConverterRegistry.with_defaults()
        assert registry.conversion_chain(Platform.KIRO_IDE, Platform.CURSOR_IDE) == [
            Platform.KIRO_IDE,
            Platform.CLAUDE_CODE,
            Platform.CURSOR_IDE,
        ]
        assert registry.conversion_chain(Platform.CURSOR_IDE, Platform.KIRO_IDE) is None
        assert registry.conversion_chain(Platform.KIRO_IDE, Platform.KIRO_IDE) == [Platform.KIRO_IDE]


class TestMarkdownSections:
    """Tests for split_markdown_sections."""

    def test_split(self):
        text = "Intro line\n## Style\nTwo spaces\n## Testing\nUse pytest\n"
        assert split_markdown_sections(text) == [
            ("general", "Intro line"),
            ("Style", "Two spaces"),
            ("Testing", "Use pytest"),
        ]


class TestClaudeToKiro:
    """Tests for Claude Code to Kiro conversion."""

    def test_convert(self, claude_context):
        result = ConversionEngine().convert(claude_context, "kiro-ide")
        assert result.success
        assert result.source == "claude-code"
        assert result.target == "kiro-ide"

        scope = result.context["data"]["kiroIde"]["local"]
        assert scope["settings"] == {"theme": "dark"}
        assert scope["specs"] == [{"name": "project-instructions", "content": "# Project\n\nWrite tests first."}]
        assert scope["hooks"][0]["name"] == "test"
        assert scope["hooks"][0]["when"] == {"type": "manual", "patterns": []}
        assert scope["hooks"][0]["then"] == {"type": "command", "command": "npm test"}
        rules = {rule.get("name"): rule for rule in scope["steeringRules"]}
        assert rules["style"] == {"name": "style", "pattern": "**/*", "rule": "Two spaces"}
        assert rules["reviewer"]["rule"] == "Review React components for bugs"

    def test_analysis(self, claude_context):
        result = ConversionEngine().convert(claude_context, Platform.KIRO_IDE)
        assert result.unsupported_features == ["permissions"]
        assert [a.source_feature for a in result.approximations] == [
            "instructions.global",
            "instructions.local",
            "commands",
            "agents",
        ]
        assert result.supported_features == ["settings", "mcpServers", "steeringRules", "specs", "hooks"]
        assert "Agent tool restrictions are not supported in Kiro and were dropped" in result.warnings
        assert result.compatibility.score == 78
        assert result.compatibility.rating == "good"

    def test_converted_context_shape(self, claude_context):
        converted = ConversionEngine().convert(claude_context, "kiro-ide").context
        assert list(converted["data"]) == ["kiroIde"]
        assert converted["sourceIde"] == "kiro-ide"
        assert converted["targetIdes"] == claude_context["targetIdes"]
        assert converted["metadata"]["platforms"] == ["kiro-ide"]
        assert converted["metadata"]["conversion"]["source"] == "claude-code"
        assert converted["metadata"]["conversion"]["target"] == "kiro-ide"
        assert converted["metadata"]["timestamp"] == "2026-01-01T00:00:00Z"

    def test_input_not_modified(self, claude_context):
        original = copy.deepcopy(claude_context)
        ConversionEngine().convert(claude_context, "kiro-ide")
        assert claude_context == original


class TestKiroToClaude:
    """Tests for Kiro to Claude Code conversion."""

    def test_convert(self, kiro_context):
        result = ConversionEngine().convert(kiro_context, "claude-code")
        assert result.success
        scope = result.context["data"]["claudeCode"]["local"]
        assert scope["commands"] == [{"name": "lint", "command": "ruff check .", "description": ""}]
        assert scope["steeringRules"] == [{"pattern": "**/*.py", "rule": "Type everything"}]
        assert scope["instructions"]["global"] == "# api\n\nREST API with FastAPI"
        assert "mcpServers" not in scope
        assert "Hook 'noop' has no command and was skipped" in result.warnings
        assert result.compatibility.score == 90
        assert result.compatibility.rating == "excellent"

    def test_task_templates_unsupported(self, kiro_context):
        kiro_context["data"]["kiroIde"]["local"]["taskTemplates"] = [{"name": "t"}]
        result = ConversionEngine().convert(kiro_context, "claude-code")
        assert result.unsupported_features == ["taskTemplates"]


class TestClaudeToCursor:
    """Tests for Claude Code to Cursor conversion."""

    def test_convert(self, claude_context):
        result = ConversionEngine().convert(claude_context, "cursor-ide")
        assert result.success
        rules = result.context["data"]["cursorIde"]["local"]["rules"]
        assert [rule["name"] for rule in rules] == [
            "steering-rule-1",
            "global-instructions",
            "local-instructions",
            "reviewer",
        ]
        assert rules[0]["globs"] == "**/*.ts"
        assert rules[1]["alwaysApply"] is True
        assert result.unsupported_features == ["commands", "permissions"]
        assert "Cursor has no custom command equivalent; 1 command(s) dropped" in result.warnings
        assert result.compatibility.score == 64

    def test_low_compatibility_fails_when_validated(self, claude_context):
        engine = ConversionEngine(min_compatibility_score=70)
        result = engine.convert(claude_context, "cursor-ide", ConversionOptions(validate_compatibility=True))
        assert not result.success
        assert result.context is None
        assert result.error == (
            "Context is not compatible with cursor-ide (compatibility score: 64%). Use force to override"
        )
        assert "Compatibility score: 64%" in result.warnings

    def test_force_overrides_threshold(self, claude_context):
        engine = ConversionEngine(min_compatibility_score=70)
        options = ConversionOptions(validate_compatibility=True, force=True)
        result = engine.convert(claude_context, "cursor-ide", options)
        assert result.success
        assert result.context is not None

    def test_threshold_ignored_without_validation(self, claude_context):
        result = ConversionEngine(min_compatibility_score=70).convert(claude_context, "cursor-ide")
        assert result.success


class TestConversionEngine:
    """Tests for engine-level behavior."""

    def test_unknown_target(self, claude_context):
        result = ConversionEngine().convert(claude_context, "vim")
        assert not result.success
        assert result.error == "Unsupported target platform: vim"

    def test_undetectable_source(self):
        result = ConversionEngine().convert({"data": {}}, "kiro-ide")
        assert not result.success
        assert result.error == "Could not determine source platform from context"

    def test_same_platform(self, claude_context):
        result = ConversionEngine().convert(claude_context, "claude-code")
        assert result.success
        assert result.context == claude_context
        assert result.context is not claude_context
        assert result.warnings == ["Source and target platforms are the same"]

    def test_missing_converter(self, kiro_context):
        result = ConversionEngine().convert(kiro_context, "cursor-ide")
        assert not result.success
        assert result.error == "No converter available for kiro-ide to cursor-ide"

    def test_source_from_metadata_platforms(self, claude_context):
        claude_context["metadata"]["platforms"] = ["claude-code"]
        claude_context["sourceIde"] = "cursor-ide"
        result = ConversionEngine().convert(claude_context, "kiro-ide")
        assert result.source == "claude-code"

    def test_convert_chain(self, kiro_context):
        results = ConversionEngine().convert_chain(kiro_context, ["kiro-ide", "claude-code", "cursor-ide"])
        assert len(results) == 2
        assert all(r.success for r in results)
        assert list(results[-1].context["data"]) == ["cursorIde"]

    def test_convert_chain_stops_at_failure(self, kiro_context):
        results = ConversionEngine().convert_chain(kiro_context, ["kiro-ide", "cursor-ide", "claude-code"])
        assert len(results) == 1
        assert not results[0].success

    def test_check_compatibility(self, claude_context):
        engine = ConversionEngine(min_compatibility_score=100)
        score = engine.check_compatibility(claude_context, "cursor-ide")
        assert score.score == 64

    def test_availability(self):
        engine = ConversionEngine()
        assert engine.is_conversion_available("claude-code", "kiro-ide")
        assert engine.is_conversion_available("cursor-ide", "cursor-ide")
        assert not engine.is_conversion_available("cursor-ide", "kiro-ide")
        assert not engine.is_conversion_available("vim", "kiro-ide")
        assert engine.available_conversions("claude-code") == [Platform.KIRO_IDE, Platform.CURSOR_IDE]

    def test_feature_mapping(self):
        mapping = ConversionEngine().feature_mapping("claude-code", "kiro-ide")
        assert mapping.direct["settings"] == "settings"
        assert "permissions" in mapping.unsupported
        assert ConversionEngine().feature_mapping("kiro-ide", "cursor-ide") is None

    def test_to_dict(self, claude_context):
        data = ConversionEngine().convert(claude_context, "kiro-ide").to_dict()
        assert data["unsupportedFeatures"] == ["permissions"]
        assert data["approximations"][0]["confidence"] == Confidence.HIGH.value
        assert data["compatibility"]["score"] == 78


class TestConversionReport:
    """Tests for ConversionReport."""

    @pytest.mark.parametrize("count,severity", [(0, "none"), (2, "low"), (3, "medium"), (5, "medium"), (6, "high")])
    def test_data_loss(self, count, severity):
        assert data_loss_severity(count) == severity

    def test_from_result(self, claude_context):
        result = ConversionEngine().convert(claude_context, "cursor-ide")
        report = ConversionReport.from_result(result)
        assert report.data_loss == "low"
        assert report.recommendations == [
            "Review unsupported features and consider manual migration",
            "Test approximated features thoroughly after conversion",
            "Address warnings before deploying converted context",
        ]
        assert report.direct == {"settings": "settings", "mcpServers": "mcpServers", "rules": "rules"}

    def test_direct_limited_to_original_fields(self, claude_context):
        result = ConversionEngine().convert(claude_context, "cursor-ide")
        report = ConversionReport.from_result(result, original=claude_context)
        assert report.direct == {"settings": "settings", "mcpServers": "mcpServers"}

    def test_failed_conversion(self, kiro_context):
        result = ConversionEngine().convert(kiro_context, "cursor-ide")
        report = ConversionReport.from_result(result)
        assert report.recommendations == ["Conversion failed - check error messages and retry"]
        assert "Error: No converter available" in report.render_text()

    def test_render_markdown(self, claude_context):
        report = ConversionReport.from_result(ConversionEngine().convert(claude_context, "kiro-ide"))
        markdown = report.render_markdown()
        assert markdown.startswith("# Conversion Report: claude-code → kiro-ide")
        assert "| Source | Target | Mapping |" in markdown
        assert "| commands | hooks | medium |" in markdown
        assert "## Unsupported Features" in markdown

    def test_to_dict(self, claude_context):
        report = ConversionReport.from_result(ConversionEngine().convert(claude_context, "kiro-ide"))
        data = report.to_dict()
        assert data["featureMapping"]["unsupported"] == ["permissions"]
        assert data["dataLoss"] == "low"

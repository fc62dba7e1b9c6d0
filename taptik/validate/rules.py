# Taptik Validation Rules
# Limits, allow-lists, support tables and message texts for upload validation

import re

from taptik.context import Platform

MIB = 1024 * 1024

# Size ceilings in bytes
DEFAULT_MAX_SIZE = 10 * MIB
PREMIUM_MAX_SIZE = 100 * MIB
STORAGE_MAX_SIZE = 50 * MIB
METADATA_MAX_SIZE = 1 * MIB
WARNING_THRESHOLD = 0.9

EDGE_FUNCTION_TIMEOUT_MS = 150_000

SUPPORTED_FORMATS = ("taptik-v1", "taptik-v2")
SUPPORTED_COMPRESSIONS = ("gzip", "brotli", "none")
SUPPORTED_IDES = tuple(p.value for p in Platform)
COMPLEXITY_LEVELS = ("minimal", "basic", "intermediate", "advanced", "expert")

REQUIRED_SECTIONS = ("sanitizedConfig", "metadata", "manifest")

REQUIRED_METADATA_FIELDS = (
    "title",
    "tags",
    "version",
    "createdAt",
    "sourceIde",
    "targetIdes",
    "complexityLevel",
    "componentCount",
    "features",
    "compatibility",
    "searchKeywords",
    "fileSize",
    "checksum",
)

REQUIRED_CONTEXT_FIELDS = ("version", "sourceIde", "targetIdes", "data", "metadata")

KNOWN_FEATURES = (
    "gitIntegration",
    "dockerSupport",
    "kubernetesIntegration",
    "autocomplete",
    "aiAssistance",
    "collaborativeEditing",
    "remoteDebugging",
    "containerization",
)

# Generated feature names -> canonical feature names
FEATURE_ALIASES: dict[str, str] = {
    "git-integration": "gitIntegration",
    "docker": "dockerSupport",
    "kubernetes": "kubernetesIntegration",
    "mcp-servers": "mcpServers",
    "custom-agents": "agents",
}

PLATFORM_FEATURES: dict[str, tuple[str, ...]] = {
    "claude-code": ("agents", "commands", "mcpServers", "steeringRules", "instructions", "aiAssistance"),
    "kiro-ide": ("gitIntegration", "dockerSupport", "kubernetesIntegration", "autocomplete"),
    "cursor-ide": ("aiAssistance", "autocomplete", "collaborativeEditing", "remoteDebugging"),
}

# Canonical features the per-platform tables have an opinion about
TRACKED_FEATURES = frozenset(KNOWN_FEATURES).union(*PLATFORM_FEATURES.values())

# Component counts that only Claude Code deploys natively
CLAUDE_SPECIFIC_COMPONENTS = ("agents", "mcpServers", "steeringRules")

COMPONENT_THRESHOLDS: dict[str, int] = {
    "agents": 500,
    "commands": 500,
    "mcpServers": 50,
    "steeringRules": 500,
    "instructions": 50,
}
SPLIT_THRESHOLD = 10_000
OPTIMIZE_THRESHOLD = 5_000

# Estimated processing cost in ms per component / feature
PROCESSING_BASE_MS = 1000
PROCESSING_COSTS: dict[str, int] = {
    "agents": 100,
    "commands": 50,
    "mcpServers": 200,
    "steeringRules": 75,
    "instructions": 150,
}
PROCESSING_FEATURE_MS = 100

# Record kind -> (scope key, label, required fields); alternatives share a tuple
RECORD_SCHEMAS: dict[Platform, tuple[tuple[str, str, tuple[tuple[str, ...], ...]], ...]] = {
    Platform.CLAUDE_CODE: (
        ("agents", "agent", (("id",), ("name",), ("prompt", "instructions"))),
        ("commands", "command", (("name",), ("command",))),
        ("mcpServers", "MCP server", (("name",), ("protocol", "transport"))),
        ("steeringRules", "steering rule", (("pattern",), ("rule",))),
    ),
    Platform.KIRO_IDE: (
        ("specs", "spec", (("name",), ("content",))),
        ("hooks", "hook", (("name",),)),
        ("mcpServers", "MCP server", (("name",), ("protocol", "transport"))),
        ("steeringRules", "steering rule", (("pattern",), ("rule",))),
    ),
    Platform.CURSOR_IDE: (
        ("rules", "rule", (("name",), ("content",))),
        ("mcpServers", "MCP server", (("name",), ("protocol", "transport"))),
    ),
}

# Markup, traversal and SQL-like content in user-visible metadata
UNSAFE_MARKUP = re.compile(r"<|>|<script|</script|javascript:|on\w+=", re.IGNORECASE)
PATH_TRAVERSAL = re.compile(r"\.\./")
SQL_KEYWORDS = re.compile(r"\b(drop|delete|insert|update)\b", re.IGNORECASE)

# Error messages
ERR_NULL_PACKAGE = "Invalid package: package is null or undefined"
ERR_NOT_OBJECT = "Invalid package: package must be an object"
ERR_CIRCULAR = "Invalid package structure: circular reference detected"
ERR_NOT_JSON = "Invalid package structure: contains values that cannot be serialized"
ERR_CHECKSUM_MISMATCH = "Checksum mismatch: package integrity compromised"
ERR_STORAGE_LIMIT = "Exceeds platform storage limit"
ERR_METADATA_TOO_LARGE = "Metadata exceeds maximum allowed size for cloud storage"
ERR_TITLE_LENGTH = "Title must be at least 3 characters long"
ERR_NO_TAGS = "At least one tag is required"
ERR_NO_TARGETS = "At least one target IDE must be specified"
ERR_ZERO_VERSION = "Invalid version: 0.0.0"
ERR_EMPTY_CHECKSUM = "Checksum cannot be empty"
ERR_NEGATIVE_SIZE = "File size cannot be negative"
ERR_NEGATIVE_COUNTS = "Component counts cannot be negative"
ERR_CREATED_AT = "Invalid date format for createdAt"


def missing_field(name: str) -> str:
    return f"Missing required field: {name}"


def unsupported_format(value: object) -> str:
    return f"Unsupported package format: {value}. Expected: {' or '.join(SUPPORTED_FORMATS)}"


def size_exceeded(maximum: int) -> str:
    return f"Package size exceeds maximum limit of {maximum // MIB}MB"


def invalid_complexity(value: object) -> str:
    return f"Invalid complexity level: {value}"


def invalid_schema(label: str, field: str) -> str:
    return f'Invalid {label} schema: missing required field "{field}"'


# Warning messages
def size_approaching(percentage: int) -> str:
    return f"Package size is approaching the maximum limit ({percentage}% used)"


def unsafe_characters(field: str) -> str:
    return f"{field} contains potentially unsafe characters"


def unsafe_tag(tag: str) -> str:
    return f'Tag "{tag}" contains potentially unsafe characters'


def high_component_count(kind: str, count: int) -> str:
    return f"Unusually high number of {kind} ({count})"


def unknown_ide(role: str, ide: object) -> str:
    return f"Unknown {role} IDE: {ide}"


def unsupported_feature(feature: str, ide: str) -> str:
    return f'Feature "{feature}" may not be supported in {ide}'


def partially_supported_feature(feature: str, ide: str) -> str:
    return f'Feature "{feature}" may not be fully supported in {ide}'


def claude_specific_components(ide: str) -> str:
    return f"Claude Code specific components may not work in {ide}"


def edge_timeout(seconds: int) -> str:
    return f"Package may exceed Edge Function timeout (estimated: {seconds}s)"


def invalid_compression(value: object) -> str:
    return f"Invalid compression type: {value}"


# Recommendations
REC_READY = "Package is ready for cloud upload"
REC_ALL_PASSED = "All validation checks passed successfully"
REC_ADD_TITLE = "Add a descriptive title to your package"
REC_PROVIDE_TITLE = "Provide a descriptive title (minimum 3 characters)"
REC_ADD_TAGS = "Add at least one tag for discoverability"
REC_USE_SEMVER = "Use semantic versioning (e.g., 1.0.0)"
REC_SPECIFY_IDE = "Specify at least one target IDE"
REC_GENERATE_CHECKSUM = "Generate a valid checksum for package integrity"
REC_REGENERATE_CHECKSUM = "Regenerate package checksum to ensure integrity"
REC_REDUCE_SIZE = "Reduce package size or consider splitting into multiple packages"
REC_SPLIT = "Consider splitting into multiple smaller packages for better manageability"
REC_OPTIMIZE_COMPONENTS = "Consider optimizing the number of components for better performance"
REC_REVIEW_SECURITY = "Review and sanitize potentially unsafe content"
REC_UPDATE_METADATA = "Ensure all metadata fields are properly filled"
REC_SUPPORTED_COMPRESSION = "Use a supported compression type (gzip, brotli or none)"
REC_ENABLE_CHUNKING = "Enable chunked upload for large packages"
REC_OPTIMIZE_FOR_EDGE = "Optimize package for edge function processing"
REC_CHECK_FEATURES = "Verify all features are supported by target IDEs"

# Error substring -> recommendation, evaluated for every error
ERROR_RECOMMENDATIONS: tuple[tuple[str, str], ...] = (
    ("Missing required field: metadata.title", REC_ADD_TITLE),
    ("Title must be", REC_PROVIDE_TITLE),
    ("tag", REC_ADD_TAGS),
    ("version", REC_USE_SEMVER),
    ("target IDE", REC_SPECIFY_IDE),
    ("Checksum cannot be empty", REC_GENERATE_CHECKSUM),
    ("Checksum mismatch", REC_REGENERATE_CHECKSUM),
    ("size exceeds", REC_REDUCE_SIZE),
)

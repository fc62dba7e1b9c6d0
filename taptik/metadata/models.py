# Taptik Metadata Models
# Descriptive cloud metadata attached to every package

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

PLACEHOLDER_CHECKSUM = "pending"


class ComplexityLevel(str, Enum):
    """Complexity bucket derived from the total component count."""

    MINIMAL = "minimal"
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @classmethod
    def from_total(cls, total: int) -> ComplexityLevel:
        """
        Map a total component count to a level.

        0 is minimal, up to 3 basic, up to 10 intermediate, up to 30
        advanced, anything above expert.
        """
        if total <= 0:
            return cls.MINIMAL
        if total <= 3:
            return cls.BASIC
        if total <= 10:
            return cls.INTERMEDIATE
        if total <= 30:
            return cls.ADVANCED
        return cls.EXPERT


@dataclass
class ComponentCount:
    """Number of components per kind across all scopes."""

    agents: int = 0
    commands: int = 0
    mcp_servers: int = 0
    steering_rules: int = 0
    instructions: int = 0

    @property
    def total(self) -> int:
        return self.agents + self.commands + self.mcp_servers + self.steering_rules + self.instructions

    def to_dict(self) -> dict[str, int]:
        return {
            "agents": self.agents,
            "commands": self.commands,
            "mcpServers": self.mcp_servers,
            "steeringRules": self.steering_rules,
            "instructions": self.instructions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComponentCount:
        return cls(
            agents=data.get("agents", 0),
            commands=data.get("commands", 0),
            mcp_servers=data.get("mcpServers", 0),
            steering_rules=data.get("steeringRules", 0),
            instructions=data.get("instructions", 0),
        )


@dataclass
class CloudMetadata:
    """Descriptive record used for search and display of a shared package."""

    title: str
    source_ide: str
    target_ides: list[str]
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    search_keywords: list[str] = field(default_factory=list)
    component_count: ComponentCount = field(default_factory=ComponentCount)
    complexity_level: ComplexityLevel = ComplexityLevel.MINIMAL
    features: list[str] = field(default_factory=list)
    compatibility: list[str] = field(default_factory=list)
    version: str = "1.0.0"
    author: str = "unknown"
    created_at: str = ""
    file_size: int = 0
    checksum: str = PLACEHOLDER_CHECKSUM
    is_public: bool = False

    @property
    def has_checksum(self) -> bool:
        """Check if the packager has filled in the checksum."""
        return bool(self.checksum) and self.checksum != PLACEHOLDER_CHECKSUM

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the wire field names."""
        data: dict[str, Any] = {
            "title": self.title,
            "tags": list(self.tags),
            "sourceIde": self.source_ide,
            "targetIdes": list(self.target_ides),
            "componentCount": self.component_count.to_dict(),
            "features": list(self.features),
            "compatibility": list(self.compatibility),
            "searchKeywords": list(self.search_keywords),
            "fileSize": self.file_size,
            "checksum": self.checksum,
            "version": self.version,
            "isPublic": self.is_public,
            "createdAt": self.created_at,
            "complexityLevel": self.complexity_level.value,
            "author": self.author,
        }
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CloudMetadata:
        """
        Build metadata from its wire form.

        Raises:
            KeyError: If title, sourceIde or targetIdes is missing.
            ValueError: If complexityLevel is not a known level.
        """
        return cls(
            title=data["title"],
            source_ide=data["sourceIde"],
            target_ides=list(data["targetIdes"]),
            description=data.get("description"),
            tags=list(data.get("tags", [])),
            search_keywords=list(data.get("searchKeywords", [])),
            component_count=ComponentCount.from_dict(data.get("componentCount") or {}),
            complexity_level=ComplexityLevel(data.get("complexityLevel", ComplexityLevel.MINIMAL.value)),
            features=list(data.get("features", [])),
            compatibility=list(data.get("compatibility", [])),
            version=data.get("version", "1.0.0"),
            author=data.get("author", "unknown"),
            created_at=data.get("createdAt", ""),
            file_size=data.get("fileSize", 0),
            checksum=data.get("checksum", PLACEHOLDER_CHECKSUM),
            is_public=data.get("isPublic", False),
        )

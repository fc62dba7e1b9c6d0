# Taptik Packager
# Assembles, writes and reads portable configuration packages

from __future__ import annotations

import copy
import gzip
import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from taptik.context import Platform, as_dict, is_empty
from taptik.exceptions import PackageFormatError, PackagingError
from taptik.metadata.models import CloudMetadata
from taptik.utils.hashing import canonical_json, json_hash, json_size

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
GZIP_LEVEL = 9


class Compression(str, Enum):
    """Package compression modes."""

    GZIP = "gzip"
    BROTLI = "brotli"
    NONE = "none"


class PackageFormat(str, Enum):
    """Versioned package format tags."""

    V1 = "taptik-v1"
    V2 = "taptik-v2"


# Scope field -> (directory or None, file) per platform; dotted fields reach into nested dicts
MANIFEST_LAYOUT: dict[Platform, tuple[str, tuple[tuple[str, str | None, str], ...]]] = {
    Platform.CLAUDE_CODE: (
        ".claude/",
        (
            ("settings", None, ".claude/settings.json"),
            ("agents", ".claude/agents/", ".claude/agents.json"),
            ("commands", ".claude/commands/", ".claude/commands.json"),
            ("mcpServers", None, ".mcp.json"),
            ("steeringRules", ".claude/steering/", ".claude/steering.json"),
            ("instructions.global", None, "CLAUDE.md"),
            ("instructions.local", None, "CLAUDE.local.md"),
        ),
    ),
    Platform.KIRO_IDE: (
        ".kiro/",
        (
            ("settings", ".kiro/settings/", ".kiro/settings/settings.json"),
            ("mcpServers", ".kiro/settings/", ".kiro/settings/mcp.json"),
            ("specs", ".kiro/specs/", ".kiro/specs.json"),
            ("steeringRules", ".kiro/steering/", ".kiro/steering.json"),
            ("hooks", ".kiro/hooks/", ".kiro/hooks.json"),
        ),
    ),
    Platform.CURSOR_IDE: (
        ".cursor/",
        (
            ("settings", None, ".cursor/settings.json"),
            ("rules", ".cursor/rules/", ".cursor/rules.json"),
            ("mcpServers", None, ".cursor/mcp.json"),
        ),
    ),
}


@dataclass
class PackageOptions:
    """Options for assembling a package."""

    compression: Compression = Compression.GZIP
    format: PackageFormat = PackageFormat.V1
    optimize_size: bool = False


@dataclass
class PackageManifest:
    """Member files and directories of a package."""

    files: list[str] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)
    total_size: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"files": list(self.files), "directories": list(self.directories), "totalSize": self.total_size}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackageManifest:
        return cls(
            files=list(data.get("files", [])),
            directories=list(data.get("directories", [])),
            total_size=data.get("totalSize", 0),
        )


@dataclass
class TaptikPackage:
    """The portable artifact: metadata, sanitized context, checksum and manifest."""

    metadata: CloudMetadata
    sanitized_config: dict[str, Any]
    checksum: str
    format: PackageFormat
    compression: Compression
    size: int
    manifest: PackageManifest

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the wire field names."""
        return {
            "metadata": self.metadata.to_dict(),
            "sanitizedConfig": self.sanitized_config,
            "checksum": self.checksum,
            "format": self.format.value,
            "compression": self.compression.value,
            "size": self.size,
            "manifest": self.manifest.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaptikPackage:
        """
        Build a package from its wire form.

        Raises:
            PackageFormatError: If a section is missing or a tag is unknown.
        """
        try:
            return cls(
                metadata=CloudMetadata.from_dict(data["metadata"]),
                sanitized_config=data["sanitizedConfig"],
                checksum=data["checksum"],
                format=PackageFormat(data["format"]),
                compression=Compression(data.get("compression", Compression.NONE.value)),
                size=data.get("size", 0),
                manifest=PackageManifest.from_dict(data.get("manifest") or {}),
            )
        except KeyError as e:
            raise PackageFormatError(f"Missing package field: {e.args[0]}") from e
        except (TypeError, ValueError) as e:
            raise PackageFormatError(f"Invalid package: {e}") from e


class Packager:
    """Creates TaptikPackage artifacts from metadata and a sanitized context."""

    def package(
        self,
        metadata: CloudMetadata,
        context: dict[str, Any],
        options: PackageOptions | None = None,
    ) -> TaptikPackage:
        """
        Assemble a package.

        The computed checksum is written into the package and into a copy of
        the metadata; the caller's metadata and context are left untouched.

        Args:
            metadata: Generated cloud metadata.
            context: Sanitized (and possibly converted) configuration context.
            options: Compression, format and size optimization.

        Returns:
            TaptikPackage

        Raises:
            PackagingError: If required fields are missing, the context cannot
                be serialized or the compression mode is unsupported.
        """
        options = options or PackageOptions()

        if not metadata.title:
            raise PackagingError("Package metadata requires a title")
        if not context.get("version"):
            raise PackagingError("Configuration context requires a version")
        if options.compression == Compression.BROTLI:
            raise PackagingError("Brotli compression is not supported; use gzip or none")

        try:
            config = optimize_context(context) if options.optimize_size else copy.deepcopy(context)
            checksum = json_hash(config)
            manifest = build_manifest(config)
        except (TypeError, ValueError, RecursionError) as e:
            raise PackagingError(f"Configuration context cannot be serialized: {e}") from e

        package_metadata = copy.deepcopy(metadata)
        package_metadata.checksum = checksum
        package_metadata.file_size = manifest.total_size

        pkg = TaptikPackage(
            metadata=package_metadata,
            sanitized_config=config,
            checksum=checksum,
            format=options.format,
            compression=options.compression,
            size=0,
            manifest=manifest,
        )
        pkg.size = package_size(pkg)

        logger.debug(
            "Packaged %s: %d files, %d bytes, checksum %s",
            options.format.value,
            len(manifest.files),
            pkg.size,
            checksum[:12],
        )
        return pkg

    def verify_integrity(self, pkg: TaptikPackage) -> list[str]:
        """
        Recompute checksum and manifest and compare them to the recorded ones.

        Returns:
            List of mismatch descriptions (empty if intact).
        """
        problems = []
        try:
            checksum = json_hash(pkg.sanitized_config)
            manifest = build_manifest(pkg.sanitized_config)
        except (TypeError, ValueError) as e:
            return [f"Configuration context cannot be serialized: {e}"]

        if checksum != pkg.checksum:
            problems.append("Package checksum does not match its content")
        if pkg.metadata.checksum != pkg.checksum:
            problems.append("Metadata checksum does not match package checksum")
        if manifest.files != pkg.manifest.files or manifest.directories != pkg.manifest.directories:
            problems.append("Manifest does not match package content")
        if manifest.total_size != pkg.manifest.total_size:
            problems.append("Manifest total size does not match package content")
        return problems


def build_manifest(context: dict[str, Any]) -> PackageManifest:
    """
    List the files and directories a context would deploy to.

    Global scopes are placed under ``~/``; total size is the sum of the
    serialized sizes of every member.
    """
    manifest = PackageManifest()
    data = as_dict(context.get("data"))
    for platform, (root, layout) in MANIFEST_LAYOUT.items():
        for scope_name, scope in as_dict(data.get(platform.data_key)).items():
            if not isinstance(scope, dict) or is_empty(scope):
                continue
            prefix = "~/" if scope_name == "global" else ""
            _add(manifest.directories, prefix + root)
            for field_path, directory, filename in layout:
                value = _lookup(scope, field_path)
                if is_empty(value):
                    continue
                if directory:
                    _add(manifest.directories, prefix + directory)
                _add(manifest.files, prefix + filename)
                manifest.total_size += _member_size(value)
    return manifest


def package_size(pkg: TaptikPackage) -> int:
    """Serialized size of a package, excluding its own size field."""
    data = pkg.to_dict()
    data.pop("size")
    return json_size(data)


def optimize_context(value: Any) -> Any:
    """
    Return a copy with empty containers dropped and whitespace runs collapsed.

    Newlines are kept so markdown instructions stay readable.
    """
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            optimized = optimize_context(item)
            if isinstance(optimized, (dict, list)) and not optimized:
                continue
            result[key] = optimized
        return result
    if isinstance(value, list):
        return [optimize_context(item) for item in value if not (isinstance(item, (dict, list)) and not item)]
    if isinstance(value, str):
        return re.sub(r"\n{3,}", "\n\n", re.sub(r"[ \t]+", " ", value))
    return value


def compress_package(pkg: TaptikPackage) -> bytes:
    """Serialize a package and apply its compression mode."""
    payload = json.dumps(pkg.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")
    if pkg.compression == Compression.GZIP:
        return gzip.compress(payload, compresslevel=GZIP_LEVEL)
    if pkg.compression == Compression.NONE:
        return payload
    raise PackagingError(f"Unsupported compression: {pkg.compression.value}")


def write_package(pkg: TaptikPackage, path: Path) -> int:
    """
    Write a package to disk.

    Returns:
        Number of bytes written.
    """
    payload = compress_package(pkg)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    logger.debug("Wrote package to %s (%d bytes)", path, len(payload))
    return len(payload)


def read_package(path: Path) -> TaptikPackage:
    """
    Read a package written by write_package.

    Raises:
        PackageFormatError: If the file cannot be decoded or is not a package.
    """
    return TaptikPackage.from_dict(read_package_data(path))


def read_package_data(path: Path) -> dict[str, Any]:
    """Decode a package file into its wire-form dict without interpreting it."""
    raw = path.read_bytes()
    try:
        if raw[:2] == GZIP_MAGIC:
            raw = gzip.decompress(raw)
        data = json.loads(raw.decode("utf-8"))
    except (OSError, EOFError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PackageFormatError(f"Cannot decode package {path}: {e}") from e

    if not isinstance(data, dict):
        raise PackageFormatError(f"Not a package: {path}")
    return data


def _lookup(scope: dict[str, Any], field_path: str) -> Any:
    value: Any = scope
    for part in field_path.split("."):
        value = as_dict(value).get(part)
    return value


def _member_size(value: Any) -> int:
    if isinstance(value, str):
        return len(value.encode("utf-8"))
    return len(canonical_json(value).encode("utf-8"))


def _add(items: list[str], item: str) -> None:
    if item not in items:
        items.append(item)

# Taptik Metadata Module
# Cloud metadata generation for configuration contexts

from taptik.metadata.generator import MetadataGenerator
from taptik.metadata.models import PLACEHOLDER_CHECKSUM, CloudMetadata, ComplexityLevel, ComponentCount

__all__ = [
    # Generator
    "MetadataGenerator",
    # Models
    "CloudMetadata",
    "ComponentCount",
    "ComplexityLevel",
    "PLACEHOLDER_CHECKSUM",
]

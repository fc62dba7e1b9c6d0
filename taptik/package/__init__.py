# Taptik Package Module
# Portable package assembly and storage

from taptik.package.packager import (
    Compression,
    PackageFormat,
    PackageManifest,
    PackageOptions,
    Packager,
    TaptikPackage,
    build_manifest,
    compress_package,
    read_package,
    read_package_data,
    write_package,
)

__all__ = [
    # Packager
    "Packager",
    "PackageOptions",
    # Models
    "TaptikPackage",
    "PackageManifest",
    "Compression",
    "PackageFormat",
    # Storage
    "build_manifest",
    "compress_package",
    "write_package",
    "read_package",
    "read_package_data",
]

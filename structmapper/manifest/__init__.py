from .manifest_loader import (ManifestError, is_manifest, load_manifest,
                              structs_from_manifest, validate_manifest)

__all__ = [
    'ManifestError',
    'is_manifest',
    'load_manifest',
    'structs_from_manifest',
    'validate_manifest',
]

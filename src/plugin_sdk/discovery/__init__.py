from .manifest import PluginManifest, iter_manifests, load_manifest
from .resolver import ResourceLocation, extract_path, locate, path_to_url
from .scanner import PackageScanner

__all__ = [
    "PluginManifest",
    "iter_manifests",
    "load_manifest",
    "ResourceLocation",
    "extract_path",
    "locate",
    "path_to_url",
    "PackageScanner",
]

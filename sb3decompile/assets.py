import os
import shutil
from typing import Any, Dict, Iterable

from .utils import ensure_dir

ASSET_KINDS = ("costumes", "sounds")

DEFAULT_DIRS = (
    "assets",
    os.path.join("assets", "costumes"),
    os.path.join("assets", "sounds"),
    "lib",
    "src",
)


def fill_defaults(project_dir: str) -> None:
    for rel in DEFAULT_DIRS:
        ensure_dir(os.path.join(project_dir, rel))


def copy_tree_files(src_dir: str, dest_dir: str) -> int:
    """Copy every file below src_dir into dest_dir, keeping relative paths."""
    copied = 0
    for root, _, files in os.walk(src_dir):
        rel_root = os.path.relpath(root, src_dir)
        target_root = dest_dir if rel_root == "." else os.path.join(dest_dir, rel_root)
        ensure_dir(target_root)
        for name in files:
            dest_path = os.path.join(target_root, name)
            shutil.copyfile(os.path.join(root, name), dest_path)
            os.chmod(dest_path, 0o644)
            copied += 1
    return copied


def copy_target_assets(target: Dict[str, Any], extracted_dir: str, assets_dir: str) -> int:
    """Copy one target's costume and sound files referenced by md5ext."""
    copied = 0
    for kind in ASSET_KINDS:
        kind_dir = os.path.join(assets_dir, kind)
        for asset in target.get(kind, []) or []:
            md5ext = asset.get("md5ext") if isinstance(asset, dict) else None
            if not md5ext:
                continue
            src_path = os.path.join(extracted_dir, md5ext)
            if not os.path.isfile(src_path):
                print(f"Warning: {kind[:-1]} asset {md5ext} not found in project")
                continue
            ensure_dir(kind_dir)
            dest_path = os.path.join(kind_dir, md5ext)
            shutil.copyfile(src_path, dest_path)
            os.chmod(dest_path, 0o644)
            copied += 1
    return copied


def copy_assets(extracted_dir: str, project_dir: str, targets: Iterable[Dict[str, Any]]) -> int:
    """Copy costume and sound files from an extracted project into project_dir/assets."""
    assets_dir = os.path.join(project_dir, "assets")
    ensure_dir(assets_dir)
    copied = 0
    # Some exporters keep assets in costumes/ and sounds/ folders instead of the archive root
    for kind in ASSET_KINDS:
        src_dir = os.path.join(extracted_dir, kind)
        if os.path.isdir(src_dir):
            copied += copy_tree_files(src_dir, os.path.join(assets_dir, kind))
    for target in targets:
        copied += copy_target_assets(target, extracted_dir, assets_dir)
    return copied

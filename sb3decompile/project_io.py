import json
import os
import tempfile
import zipfile
from typing import Any, Dict, List, Optional

import toml

from .assets import copy_assets, fill_defaults
from .blocks_to_code import ActorCode, generate_project_code, ordered_targets
from .constants import DecompileSettings
from .diagnostics import DiagnosticCollector
from .errors import ProjectInputError
from .utils import clear_dir, ensure_dir, safe_name, write_json_file

PROJECT_JSON = "project.json"
CONFIG_FILE = "jvavscratch.toml"
MANIFEST_FILE = "project.d.json"
CODE_EXTENSION = ".js"


def extract_project(sb3_path: str, temp_dir: str) -> str:
    """Extract an .sb3 archive into temp_dir and return the project.json path."""
    if not os.path.exists(sb3_path):
        raise ProjectInputError(f"{sb3_path} not found")

    clear_dir(temp_dir)
    try:
        with zipfile.ZipFile(sb3_path, "r") as archive:
            archive.extractall(temp_dir)
    except zipfile.BadZipFile as exc:
        raise ProjectInputError(f"{sb3_path} is not a valid .sb3 archive: {exc}") from exc

    project_json = os.path.join(temp_dir, PROJECT_JSON)
    if not os.path.exists(project_json):
        raise ProjectInputError("project.json not found in the archive.")
    return project_json


def load_project(extracted_dir: str) -> Dict[str, Any]:
    path = os.path.join(extracted_dir, PROJECT_JSON)
    if not os.path.exists(path):
        raise ProjectInputError(f"{path} not found")
    try:
        with open(path, "r", encoding="utf-8") as handle:
            project = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ProjectInputError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(project, dict):
        raise ProjectInputError(f"{path} does not describe a project")
    return project


def write_config(project_dir: str, project_name: str) -> None:
    config = {
        "name": project_name,
        "description": "Decompiled from a Scratch project",
        "author": "",
        "version": "1.0.0",
    }
    with open(os.path.join(project_dir, CONFIG_FILE), "w", encoding="utf-8") as handle:
        toml.dump(config, handle)


def actor_dir_names(actors: List[ActorCode]) -> List[str]:
    """Filesystem-safe, unique directory names for the actors."""
    names: List[str] = []
    for actor in actors:
        base = safe_name(actor.name, "Sprite")
        candidate = base
        suffix = 2
        while candidate in names:
            candidate = f"{base}_{suffix}"
            suffix += 1
        names.append(candidate)
    return names


def write_actor_code(src_dir: str, dir_name: str, code: str) -> str:
    actor_dir = os.path.join(src_dir, dir_name)
    ensure_dir(actor_dir)
    path = os.path.join(actor_dir, f"{dir_name}{CODE_EXTENSION}")
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(code)
    return path


def create_project(
    extracted_dir: str,
    project_dir: str,
    project_name: str,
    settings: Optional[DecompileSettings] = None,
    workers: int = 1,
    clean: bool = True,
) -> DiagnosticCollector:
    """Write a jvavscratch project for an extracted .sb3 into project_dir.

    Actors whose code could not be generated are reported and skipped; every
    other actor is still written.
    """
    project = load_project(extracted_dir)

    if clean:
        clear_dir(project_dir)
    else:
        ensure_dir(project_dir)

    write_config(project_dir, project_name)
    fill_defaults(project_dir)

    diag_collector = DiagnosticCollector()
    actors = generate_project_code(project, settings, workers)
    src_dir = os.path.join(project_dir, "src")
    written: List[str] = []
    for actor, dir_name in zip(actors, actor_dir_names(actors)):
        diag_collector.add_context_diagnostics(actor.diagnostics)
        if actor.code is None:
            continue
        write_actor_code(src_dir, dir_name, actor.code)
        written.append(dir_name)

    write_json_file(os.path.join(project_dir, MANIFEST_FILE), {"sprites": written}, indent=2)
    copy_assets(extracted_dir, project_dir, ordered_targets(project))
    return diag_collector


def decompile_sb3(
    sb3_path: str,
    output_dir: str,
    project_name: Optional[str] = None,
    temp_dir: Optional[str] = None,
    settings: Optional[DecompileSettings] = None,
    workers: int = 1,
    clean: bool = True,
) -> DiagnosticCollector:
    """Extract an .sb3 and write the decompiled project into output_dir."""
    name = project_name or os.path.splitext(os.path.basename(sb3_path))[0]
    if temp_dir is not None:
        extract_project(sb3_path, temp_dir)
        return create_project(temp_dir, output_dir, name, settings, workers, clean)
    with tempfile.TemporaryDirectory(prefix="sb3decompile_") as scratch_dir:
        extract_project(sb3_path, scratch_dir)
        return create_project(scratch_dir, output_dir, name, settings, workers, clean)

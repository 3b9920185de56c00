"""Shared fixtures for building block graphs and packaged projects."""

import json
import zipfile

import pytest

from sb3decompile.constants import DecompileSettings
from sb3decompile.diagnostics import DiagnosticContext
from sb3decompile.expressions import ExpressionGenerator
from sb3decompile.graph_model import GraphModel
from sb3decompile.statements import StatementGenerator


def make_block(opcode, next=None, inputs=None, fields=None, mutation=None, parent=None, top_level=False):
    block = {
        "opcode": opcode,
        "next": next,
        "parent": parent,
        "inputs": inputs or {},
        "fields": fields or {},
        "shadow": False,
        "topLevel": top_level,
    }
    if mutation is not None:
        block["mutation"] = mutation
    return block


@pytest.fixture
def block():
    return make_block


@pytest.fixture
def settings():
    return DecompileSettings()


@pytest.fixture
def generators(settings):
    """Factory returning (statement generator, diagnostics) for raw blocks."""
    def _build(blocks, variables=None, lists=None, name="Sprite1"):
        graph = GraphModel.build(name, blocks, variables or {}, lists or {})
        diag = DiagnosticContext(actor_name=name)
        expressions = ExpressionGenerator(graph, settings, diag)
        return StatementGenerator(graph, settings, diag, expressions=expressions), diag
    return _build


@pytest.fixture
def make_sb3(tmp_path):
    """Write a .sb3 archive holding project and extra files, return its path."""
    def _make(project, files=None, name="game.sb3", include_project=True):
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as archive:
            if include_project:
                archive.writestr("project.json", json.dumps(project))
            for file_name, data in (files or {}).items():
                archive.writestr(file_name, data)
        return str(path)
    return _make

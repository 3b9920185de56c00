"""Variable and list declarations emitted at the top of each actor's code."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .constants import CLOUD_PREFIX, DecompileSettings
from .graph_model import GraphModel
from .utils import format_literal, quote_string

VARIABLE_WRITE_OPCODES = {"data_setvariableto", "data_changevariableby"}


@dataclass
class Declarations:
    variables: Dict[str, Any] = field(default_factory=dict)
    lists: Dict[str, List[Any]] = field(default_factory=dict)


def collect_declarations(graph: GraphModel, settings: DecompileSettings) -> Declarations:
    """Merge explicit declarations, names found on blocks and fallback defaults.

    An explicit declaration wins over a scanned name, which wins over a
    fallback default. Names keep the order they were first discovered in.
    """
    decls = Declarations(
        variables=dict(graph.variables),
        lists={name: list(values) for name, values in graph.lists.items()},
    )

    for block in graph.blocks.values():
        if block.opcode in VARIABLE_WRITE_OPCODES:
            name = block.field_value("VARIABLE")
            if isinstance(name, str) and name and not name.startswith(CLOUD_PREFIX):
                decls.variables.setdefault(name, "")
        elif block.opcode.startswith("data_"):
            name = block.field_value("LIST")
            if isinstance(name, str) and name:
                decls.lists.setdefault(name, [])

    for name, value in settings.fallback_variables.items():
        decls.variables.setdefault(name, value)

    seeded = settings.seeded_list_name
    if seeded and seeded in decls.lists and not decls.lists[seeded]:
        decls.lists[seeded] = list(settings.seeded_list_values)

    return decls


def render_declarations(decls: Declarations) -> List[str]:
    """Render declarations as lines; each non-empty group ends with a blank line."""
    lines: List[str] = []
    if decls.variables:
        for name, value in decls.variables.items():
            lines.append(f"let {name} = {format_literal(value)};")
        lines.append("")
    if decls.lists:
        for name, values in decls.lists.items():
            if values:
                items = ", ".join(format_literal(item) for item in values)
                lines.append(f"list.newList({quote_string(name)}, [{items}], false);")
            else:
                lines.append(f"list.createList({quote_string(name)});")
        lines.append("")
    return lines

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .constants import CODE_HEADER, MAIN_CODE_HEADER, NO_BLOCKS_COMMENT, DecompileSettings
from .declarations import collect_declarations, render_declarations
from .diagnostics import DiagnosticContext
from .errors import StructuralOverflow
from .graph_model import GraphModel
from .opcodes import REGISTRY, OpcodeRegistry
from .statements import StatementGenerator
from .top_level import find_top_level_blocks


@dataclass
class ActorCode:
    """Generated code for one actor, or the reason it could not be generated."""
    name: str
    code: Optional[str]
    diagnostics: DiagnosticContext = field(default_factory=DiagnosticContext)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def generate_graph_code(
    graph: GraphModel,
    settings: DecompileSettings,
    diag: DiagnosticContext,
    registry: OpcodeRegistry = REGISTRY,
) -> str:
    """Generate the full source text for one actor.

    Raises StructuralOverflow when a block chain is cyclic or too deep.
    """
    cycle_at = graph.find_next_cycle()
    if cycle_at is not None:
        raise StructuralOverflow(f"Cyclic block chain at '{cycle_at}'", cycle_at)

    lines: List[str] = [CODE_HEADER, ""]
    lines.extend(render_declarations(collect_declarations(graph, settings)))

    entries = find_top_level_blocks(graph)
    if not entries:
        lines.append(NO_BLOCKS_COMMENT)
        return "\n".join(lines) + "\n"

    generator = StatementGenerator(graph, settings, diag, registry)
    lines.append(MAIN_CODE_HEADER)
    for idx, entry_id in enumerate(entries):
        if idx:
            lines.append("")
        lines.extend(generator.entry_lines(entry_id))
    return "\n".join(lines) + "\n"


def generate_actor_code(
    target: Mapping[str, Any],
    settings: Optional[DecompileSettings] = None,
    registry: OpcodeRegistry = REGISTRY,
) -> ActorCode:
    settings = settings or DecompileSettings()
    graph = GraphModel.from_target(target)
    diag = DiagnosticContext(actor_name=graph.name)
    try:
        code = generate_graph_code(graph, settings, diag, registry)
    except StructuralOverflow as exc:
        diag.error(f"Code generation aborted: {exc}", exc.block_id)
        return ActorCode(name=graph.name, code=None, diagnostics=diag, error=str(exc))
    except RecursionError:
        # Only reachable when max_nesting is raised past what the interpreter allows
        message = "Block nesting exceeds the interpreter recursion limit"
        diag.error(f"Code generation aborted: {message}")
        return ActorCode(name=graph.name, code=None, diagnostics=diag, error=message)
    return ActorCode(name=graph.name, code=code, diagnostics=diag)


def ordered_targets(project: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Return the stage followed by every sprite, in project order."""
    targets = project.get("targets")
    targets = targets if isinstance(targets, list) else []

    stage = project.get("stage")
    if not isinstance(stage, dict):
        stage = next((t for t in targets if isinstance(t, dict) and t.get("isStage")), {})
    ordered: List[Dict[str, Any]] = [dict(stage, name="Stage", isStage=True)]
    ordered.extend(t for t in targets if isinstance(t, dict) and not t.get("isStage"))
    return ordered


def generate_project_code(
    project: Mapping[str, Any],
    settings: Optional[DecompileSettings] = None,
    workers: int = 1,
    registry: OpcodeRegistry = REGISTRY,
) -> List[ActorCode]:
    """Generate code for the stage and every sprite.

    Results keep the stage-then-sprites order whatever the worker count.
    """
    settings = settings or DecompileSettings()
    targets = ordered_targets(project)
    if workers <= 1 or len(targets) <= 1:
        return [generate_actor_code(target, settings, registry) for target in targets]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda target: generate_actor_code(target, settings, registry), targets))

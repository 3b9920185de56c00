"""Turns command blocks and their next chains into indented lines of code."""

from typing import List, Optional, Set

from .constants import UNSUPPORTED_CATEGORIES, DecompileSettings
from .diagnostics import DiagnosticContext
from .errors import StructuralOverflow
from .expressions import NULL, ExpressionGenerator, is_menu_shadow
from .graph_model import Block, GraphModel
from .opcodes import (
    COMMAND_TEMPLATES,
    HAT_COMMENTS,
    REGISTRY,
    SUBSTACK2_INPUTS,
    SUBSTACK_INPUTS,
    OpcodeRegistry,
    template_placeholders,
)

DEFAULT_REPEAT_TIMES = "10"


class StatementGenerator:
    def __init__(
        self,
        graph: GraphModel,
        settings: DecompileSettings,
        diag: DiagnosticContext,
        registry: OpcodeRegistry = REGISTRY,
        expressions: Optional[ExpressionGenerator] = None,
    ) -> None:
        self.graph = graph
        self.settings = settings
        self.diag = diag
        self.registry = registry
        self.expressions = expressions or ExpressionGenerator(graph, settings, diag, registry)
        self._steps = 0
        # Blocks whose nested bodies are being emitted right now
        self._open: Set[str] = set()

    def line(self, depth: int, text: str) -> str:
        return f"{self.settings.indent * depth}{text}"

    def emit_chain(self, block_id: str, depth: int = 0) -> str:
        """Return the code for a block and everything reachable through its next chain."""
        return "".join(f"{line}\n" for line in self.entry_lines(block_id, depth))

    def entry_lines(self, block_id: str, depth: int = 0) -> List[str]:
        """Lines for one entry chain; the step bound starts over for each entry."""
        self._steps = 0
        return self.chain_lines(block_id, depth)

    def chain_lines(self, block_id: Optional[str], depth: int) -> List[str]:
        if self.expressions.depth >= self.settings.max_nesting:
            raise StructuralOverflow(
                f"Nesting deeper than {self.settings.max_nesting} levels", block_id
            )

        lines: List[str] = []
        seen: Set[str] = set()
        current = block_id
        while current:
            if current in seen or current in self._open:
                raise StructuralOverflow(f"Cyclic block chain at '{current}'", current)
            self._steps += 1
            if self._steps > self.settings.max_chain_steps:
                raise StructuralOverflow(
                    f"Block chain exceeds {self.settings.max_chain_steps} steps", current
                )

            block = self.graph.get(current)
            if block is None:
                self.diag.warning(f"Unresolved block reference '{current}'", current)
                break

            seen.add(current)
            self._open.add(current)
            self.expressions.depth += 1
            try:
                lines.extend(self.emit_block(block, depth))
            finally:
                self.expressions.depth -= 1
                self._open.discard(current)

            if block.opcode in self.registry.chain_owners:
                break
            current = block.next
        return lines

    def body_lines(self, block: Block, input_names, depth: int) -> List[str]:
        """Lines of a nested body input; empty when the input is absent or unresolved."""
        for name in input_names:
            if name in block.inputs:
                ref = block.input_ref(name)
                if ref is None:
                    return []
                return self.chain_lines(ref, depth)
        return []

    def has_body(self, block: Block, input_names) -> bool:
        return any(block.input_ref(name) for name in input_names)

    def emit_block(self, block: Block, depth: int) -> List[str]:
        handler = self.registry.statement_handler(block.opcode)
        if handler is not None:
            return handler(self, block, depth)
        if self.registry.expression_handler(block.opcode) is not None or is_menu_shadow(block.opcode):
            # A loose reporter sitting on its own in the workspace
            return [self.line(depth, f"{self.expressions.render_block(block.block_id)};")]
        return [self.unsupported_line(block, depth)]

    def unsupported_line(self, block: Block, depth: int) -> str:
        self.diag.info(f"Unsupported block '{block.opcode}'", block.block_id)
        for prefix, category in UNSUPPORTED_CATEGORIES:
            if block.opcode.startswith(prefix):
                return self.line(depth, f"// {category} block: {block.opcode}")
        return self.line(depth, f"// Unsupported block: {block.opcode}")


def _hat_statement(comment: str):
    def handler(gen: StatementGenerator, block: Block, depth: int) -> List[str]:
        args = {name: str(block.field_value(name) or "") for name in template_placeholders(comment)}
        return [gen.line(depth, comment.format(**args))]
    return handler


def _template_statement(template: str):
    def handler(gen: StatementGenerator, block: Block, depth: int) -> List[str]:
        return [gen.line(depth, f"{gen.expressions.render_template(block, template)};")]
    return handler


for _opcode, _comment in HAT_COMMENTS.items():
    REGISTRY.register_statement(_opcode, _hat_statement(_comment))

for _opcode, _template in COMMAND_TEMPLATES.items():
    REGISTRY.register_statement(_opcode, _template_statement(_template))


def _variable_name(block: Block) -> str:
    return str(block.field_value("VARIABLE", "my variable"))


@REGISTRY.statement("data_setvariableto")
def set_variable(gen: StatementGenerator, block: Block, depth: int) -> List[str]:
    value = gen.expressions.render_named_input(block, "VALUE")
    return [gen.line(depth, f"{_variable_name(block)} = {value};")]


@REGISTRY.statement("data_changevariableby")
def change_variable(gen: StatementGenerator, block: Block, depth: int) -> List[str]:
    name = _variable_name(block)
    value = gen.expressions.render_named_input(block, "VALUE")
    return [gen.line(depth, f"{name} = {name} + {value};")]


def _wrap(gen: StatementGenerator, block: Block, depth: int, header: str) -> List[str]:
    lines = [gen.line(depth, header)]
    lines.extend(gen.body_lines(block, SUBSTACK_INPUTS, depth + 1))
    lines.append(gen.line(depth, "}"))
    return lines


@REGISTRY.statement("control_repeat")
def repeat_times(gen: StatementGenerator, block: Block, depth: int) -> List[str]:
    times_field = block.field_value("TIMES")
    if times_field is not None:
        times = gen.expressions.render_literal(times_field)
    elif "TIMES" in block.inputs:
        times = gen.expressions.render_input(block.inputs["TIMES"])
    else:
        times = DEFAULT_REPEAT_TIMES
    return _wrap(gen, block, depth, f"for (let i = 0; i < {times}; i++) {{")


@REGISTRY.statement("control_repeat_until", "control_while")
def repeat_while(gen: StatementGenerator, block: Block, depth: int) -> List[str]:
    condition = gen.expressions.render_named_input(block, "CONDITION")
    return _wrap(gen, block, depth, f"while ({condition}) {{")


@REGISTRY.statement("control_forever")
def forever(gen: StatementGenerator, block: Block, depth: int) -> List[str]:
    return _wrap(gen, block, depth, "while (true) {")


@REGISTRY.statement("control_if", "control_if_else")
def if_else(gen: StatementGenerator, block: Block, depth: int) -> List[str]:
    condition = gen.expressions.render_named_input(block, "CONDITION")
    lines = [gen.line(depth, f"if ({condition}) {{")]
    lines.extend(gen.body_lines(block, SUBSTACK_INPUTS, depth + 1))
    if gen.has_body(block, SUBSTACK2_INPUTS):
        lines.append(gen.line(depth, "} else {"))
        lines.extend(gen.body_lines(block, SUBSTACK2_INPUTS, depth + 1))
    lines.append(gen.line(depth, "}"))
    return lines


def procedure_name(proccode: str) -> str:
    name = proccode.split(" ")[0] if proccode else ""
    return name or "customBlock"


@REGISTRY.statement("procedures_definition", owns_next=True)
def define_procedure(gen: StatementGenerator, block: Block, depth: int) -> List[str]:
    prototype = block
    if not block.mutation:
        prototype = gen.graph.get(block.input_ref("custom_block")) or block
    proccode = prototype.mutation.get("proccode") or block.field_value("custom_block") or ""

    input_ids = prototype.mutation_list("inputids", "argumentids")
    names = prototype.mutation_list("paramnames", "argumentnames")
    count = len(input_ids) if input_ids else len(names)
    params = [str(names[idx]) if idx < len(names) else f"param{idx + 1}" for idx in range(count)]

    lines = [gen.line(depth, f"function {procedure_name(str(proccode))}({', '.join(params)}) {{")]
    if "custom_block_substack" in block.inputs:
        lines.extend(gen.body_lines(block, ("custom_block_substack",), depth + 1))
        lines.append(gen.line(depth, "}"))
        if block.next:
            lines.extend(gen.chain_lines(block.next, depth))
        return lines

    # Scratch 3 keeps the body as the definition's next chain
    if block.next:
        lines.extend(gen.chain_lines(block.next, depth + 1))
    lines.append(gen.line(depth, "}"))
    return lines


@REGISTRY.statement("procedures_call")
def call_procedure(gen: StatementGenerator, block: Block, depth: int) -> List[str]:
    name = procedure_name(str(block.mutation.get("proccode") or ""))
    args = [
        gen.expressions.render_input(block.inputs.get(str(input_id)))
        if str(input_id) in block.inputs else NULL
        for input_id in block.mutation_list("inputids", "argumentids")
    ]
    return [gen.line(depth, f"{name}({', '.join(args)});")]

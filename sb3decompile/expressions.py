"""Turns reporter blocks and literal inputs into expression text.

Expression generation never raises: a missing input, an id that does not
resolve, a reference cycle or an over-deep nesting all render as ``null``
and leave a warning on the actor's diagnostics.
"""

from typing import Any, Dict, List

from .constants import MENU_SHADOW_OPCODES, DecompileSettings
from .diagnostics import DiagnosticContext
from .graph_model import Block, GraphModel
from .opcodes import BINARY_OPERATORS, REGISTRY, REPORTER_TEMPLATES, OpcodeRegistry, template_placeholders
from .utils import format_literal, format_number, parse_number, quote_string

NULL = "null"

# Scratch primitive kinds inside an input array, e.g. [4, "10"] or [12, "score", "id"]
BROADCAST_PRIMITIVE = 11
VARIABLE_PRIMITIVE = 12
LIST_PRIMITIVE = 13


def is_menu_shadow(opcode: str) -> bool:
    return (
        opcode in MENU_SHADOW_OPCODES
        or opcode.endswith("menu")
        or opcode.startswith("pen_menu")
    )


class ExpressionGenerator:
    def __init__(
        self,
        graph: GraphModel,
        settings: DecompileSettings,
        diag: DiagnosticContext,
        registry: OpcodeRegistry = REGISTRY,
    ) -> None:
        self.graph = graph
        self.settings = settings
        self.diag = diag
        self.registry = registry
        self._active: List[str] = []
        # Open nesting levels, statement bodies included
        self.depth = 0

    def render_input(self, input_data: Any) -> str:
        """Render a raw input array ([shadow_kind, value, ...])."""
        if not isinstance(input_data, list) or len(input_data) < 2:
            return NULL

        value = input_data[1]
        if isinstance(value, str):
            return self.render_block(value)
        if isinstance(value, list) and len(value) >= 2:
            kind = value[0]
            if kind in (VARIABLE_PRIMITIVE, LIST_PRIMITIVE):
                return str(value[1])
            if kind == BROADCAST_PRIMITIVE:
                return quote_string(str(value[1]))
            return self.render_literal(value[1])
        return NULL

    def render_named_input(self, block: Block, *names: str) -> str:
        """Render the first of the given inputs that the block has."""
        for name in names:
            if name in block.inputs:
                return self.render_input(block.inputs[name])
        return NULL

    def render_literal(self, value: Any) -> str:
        if isinstance(value, str):
            number = parse_number(value)
            if number is not None:
                return format_number(number)
            if value in self.settings.free_variable_names:
                return value
            return quote_string(value)
        return format_literal(value)

    def render_block(self, block_id: str) -> str:
        block = self.graph.get(block_id)
        if block is None:
            self.diag.warning(f"Unresolved block reference '{block_id}'", block_id)
            return NULL
        if block_id in self._active:
            self.diag.warning("Cyclic reporter reference", block_id)
            return NULL
        if self.depth >= self.settings.max_nesting:
            self.diag.warning("Reporter nesting too deep", block_id)
            return NULL

        handler = self.registry.expression_handler(block.opcode)
        if handler is None:
            if is_menu_shadow(block.opcode):
                return render_menu(block)
            self.diag.info(f"Unsupported reporter '{block.opcode}'", block_id)
            return NULL

        self._active.append(block_id)
        self.depth += 1
        try:
            return handler(self, block)
        finally:
            self.depth -= 1
            self._active.pop()

    def render_template(self, block: Block, template: str) -> str:
        args: Dict[str, str] = {}
        for name in template_placeholders(template):
            if name in block.inputs:
                args[name] = self.render_input(block.inputs[name])
            elif block.fields.get(name) is not None:
                args[name] = quote_string(str(block.fields[name]))
            else:
                args[name] = NULL
        return template.format(**args)


def render_menu(block: Block) -> str:
    for value in block.fields.values():
        if value is not None:
            return quote_string(str(value))
    return NULL


@REGISTRY.expression(*BINARY_OPERATORS)
def binary_operator(gen: ExpressionGenerator, block: Block) -> str:
    left = gen.render_named_input(block, "OPERAND1", "NUM1")
    right = gen.render_named_input(block, "OPERAND2", "NUM2")
    return f"{left} {BINARY_OPERATORS[block.opcode]} {right}"


@REGISTRY.expression("operator_not")
def logical_not(gen: ExpressionGenerator, block: Block) -> str:
    return f"!({gen.render_named_input(block, 'OPERAND')})"


@REGISTRY.expression("data_variable")
def variable_reference(gen: ExpressionGenerator, block: Block) -> str:
    return str(block.field_value("VARIABLE", "my variable"))


@REGISTRY.expression("data_listcontents")
def list_reference(gen: ExpressionGenerator, block: Block) -> str:
    return str(block.field_value("LIST", "my list"))


@REGISTRY.expression("argument_reporter_string_number", "argument_reporter_boolean")
def argument_reference(gen: ExpressionGenerator, block: Block) -> str:
    return str(block.field_value("VALUE", NULL))


def _template_expression(template: str):
    def handler(gen: ExpressionGenerator, block: Block) -> str:
        return gen.render_template(block, template)
    return handler


for _opcode, _template in REPORTER_TEMPLATES.items():
    REGISTRY.register_expression(_opcode, _template_expression(_template))


"""Tests for statement generation over block chains."""

import pytest

from sb3decompile.constants import DecompileSettings
from sb3decompile.diagnostics import DiagnosticContext
from sb3decompile.errors import StructuralOverflow
from sb3decompile.graph_model import GraphModel
from sb3decompile.statements import StatementGenerator


def num(value):
    return [1, [4, str(value)]]


def text(value):
    return [1, [10, value]]


@pytest.fixture
def emit(generators):
    def _emit(blocks, start="a"):
        gen, diag = generators(blocks)
        return gen.emit_chain(start), diag
    return _emit


def test_chain_follows_next(emit, block):
    blocks = {
        "a": block("event_whenflagclicked", next="b"),
        "b": block("data_setvariableto", next="c", inputs={"VALUE": text("5")}, fields={"VARIABLE": ["score", "v"]}),
        "c": block("data_changevariableby", inputs={"VALUE": num(1)}, fields={"VARIABLE": ["score", "v"]}),
    }
    code, _ = emit(blocks)
    assert code == (
        "// When green flag clicked\n"
        "score = 5;\n"
        "score = score + 1;\n"
    )


def test_repeat_with_say_body(emit, block):
    blocks = {
        "a": block("control_repeat", inputs={"TIMES": num(10), "SUBSTACK": [2, "say"]}),
        "say": block("looks_say", inputs={"MESSAGE": text("Hello!")}),
    }
    code, _ = emit(blocks)
    assert code == (
        "for (let i = 0; i < 10; i++) {\n"
        '    looks.say("Hello!");\n'
        "}\n"
    )


def test_repeat_count_from_field(emit, block):
    blocks = {"a": block("control_repeat", fields={"TIMES": ["3", None]})}
    code, _ = emit(blocks)
    assert code == "for (let i = 0; i < 3; i++) {\n}\n"


def test_repeat_without_count_defaults_to_ten(emit, block):
    code, _ = emit({"a": block("control_repeat")})
    assert code.startswith("for (let i = 0; i < 10; i++) {")


def test_say_message_from_field(emit, block):
    code, _ = emit({"a": block("looks_say", fields={"MESSAGE": ['He said "hi"', None]})})
    assert code == 'looks.say("He said \\"hi\\"");\n'


def test_repeat_until_uses_condition_directly(emit, block):
    blocks = {
        "a": block("control_repeat_until", inputs={"CONDITION": [2, "cond"], "SUBSTACK": [2, "move"]}),
        "cond": block("operator_gt", inputs={"OPERAND1": [3, [12, "x", "v"], num(0)], "OPERAND2": num(100)}),
        "move": block("motion_movesteps", inputs={"STEPS": num(10)}),
    }
    code, _ = emit(blocks)
    assert code == (
        "while (x > 100) {\n"
        "    motion.moveSteps(10);\n"
        "}\n"
    )


def test_forever(emit, block):
    blocks = {
        "a": block("control_forever", inputs={"SUBSTACK": [2, "b"]}),
        "b": block("motion_turnright", inputs={"DEGREES": num(15)}),
    }
    code, _ = emit(blocks)
    assert code == "while (true) {\n    motion.turnRight(15);\n}\n"


def test_if_without_else(emit, block):
    blocks = {
        "a": block("control_if", inputs={"CONDITION": [2, "c"], "SUBSTACK": [2, "b"]}),
        "b": block("looks_hide"),
        "c": block("sensing_mousedown"),
    }
    code, _ = emit(blocks)
    assert code == "if (sensing.mouseDown()) {\n    looks.hide();\n}\n"
    assert "else" not in code


def test_if_else_both_branches(emit, block):
    blocks = {
        "a": block("control_if_else", next="d", inputs={
            "CONDITION": [2, "c"], "SUBSTACK": [2, "b1"], "SUBSTACK2": [2, "b2"],
        }),
        "b1": block("looks_show"),
        "b2": block("looks_hide"),
        "c": block("operator_equals", inputs={"OPERAND1": num(1), "OPERAND2": num(1)}),
        "d": block("sound_stopallsounds"),
    }
    code, _ = emit(blocks)
    assert code == (
        "if (1 == 1) {\n"
        "    looks.show();\n"
        "} else {\n"
        "    looks.hide();\n"
        "}\n"
        "sound.stopAllSounds();\n"
    )


def test_if_else_without_alternate_omits_else(emit, block):
    blocks = {
        "a": block("control_if_else", inputs={"CONDITION": [2, "c"], "SUBSTACK": [2, "b"], "SUBSTACK2": [1, None]}),
        "b": block("looks_show"),
        "c": block("sensing_mousedown"),
    }
    code, _ = emit(blocks)
    assert "else" not in code


def test_nested_indentation(emit, block):
    blocks = {
        "a": block("control_forever", inputs={"SUBSTACK": [2, "b"]}),
        "b": block("control_if", inputs={"CONDITION": [2, "c"], "SUBSTACK": [2, "d"]}),
        "c": block("sensing_mousedown"),
        "d": block("looks_nextcostume"),
    }
    code, _ = emit(blocks)
    assert code.splitlines() == [
        "while (true) {",
        "    if (sensing.mouseDown()) {",
        "        looks.nextCostume();",
        "    }",
        "}",
    ]


def test_missing_substack_keeps_construct(emit, block):
    blocks = {"a": block("control_repeat", inputs={"TIMES": num(2), "SUBSTACK": [2, "ghost"]}, next="b"),
              "b": block("looks_show")}
    code, diag = emit(blocks)
    assert code == "for (let i = 0; i < 2; i++) {\n}\nlooks.show();\n"
    assert any("ghost" in d.message for d in diag.get_warnings())


def test_next_to_missing_block_stops_chain(emit, block):
    code, diag = emit({"a": block("looks_show", next="ghost")})
    assert code == "looks.show();\n"
    assert diag.get_warnings()


def test_list_commands(emit, block):
    blocks = {
        "a": block("data_addtolist", next="b", inputs={"ITEM": text("x")}, fields={"LIST": ["items", "l"]}),
        "b": block("data_deleteoflist", next="c", inputs={"INDEX": num(1)}, fields={"LIST": ["items", "l"]}),
        "c": block("data_replaceitemoflist", next="d",
                   inputs={"INDEX": num(2), "ITEM": text("y")}, fields={"LIST": ["items", "l"]}),
        "d": block("data_deletealloflist", fields={"LIST": ["items", "l"]}),
    }
    code, _ = emit(blocks)
    assert code.splitlines() == [
        'list.addItem("items", "x");',
        'list.deleteItem("items", 1);',
        'list.replace("items", 2, "y");',
        'list.deleteAllOfList("items");',
    ]


def test_control_commands(emit, block):
    blocks = {
        "a": block("control_wait", next="b", inputs={"DURATION": num("0.5")}),
        "b": block("control_stop", fields={"STOP_OPTION": ["all", None]}),
    }
    code, _ = emit(blocks)
    assert code.splitlines() == ["control.wait(0.5);", 'control.stop("all");']


class TestProcedures:
    def test_definition_with_prototype_and_next_body(self, emit, block):
        blocks = {
            "a": block("procedures_definition", next="body", inputs={"custom_block": [1, "proto"]}),
            "proto": block("procedures_prototype", inputs={"arg1": [1, "r1"], "arg2": [1, "r2"]}, mutation={
                "proccode": "jump %s %s", "argumentids": '["arg1", "arg2"]',
                "argumentnames": '["height", "times"]', "warp": "false",
            }),
            "r1": block("argument_reporter_string_number", fields={"VALUE": ["height", None]}),
            "r2": block("argument_reporter_string_number", fields={"VALUE": ["times", None]}),
            "body": block("motion_changeyby", inputs={"DY": [3, "h", num(0)]}),
            "h": block("argument_reporter_string_number", fields={"VALUE": ["height", None]}),
        }
        code, _ = emit(blocks)
        assert code == (
            "function jump(height, times) {\n"
            "    motion.changeY(height);\n"
            "}\n"
        )

    def test_definition_with_inline_mutation_and_substack(self, emit, block):
        blocks = {
            "a": block("procedures_definition", next="after",
                       inputs={"custom_block_substack": [2, "body"]},
                       mutation={"proccode": "greet %s", "inputids": ["in1", "in2"], "paramnames": ["who"]}),
            "body": block("looks_show"),
            "after": block("looks_hide"),
        }
        code, _ = emit(blocks)
        assert code.splitlines() == [
            "function greet(who, param2) {",
            "    looks.show();",
            "}",
            "looks.hide();",
        ]

    def test_definition_without_metadata(self, emit, block):
        code, _ = emit({"a": block("procedures_definition")})
        assert code == "function customBlock() {\n}\n"

    def test_call_in_declared_order(self, emit, block):
        blocks = {
            "a": block("procedures_call", inputs={
                "second": text("b"),
                "first": [3, [12, "score", "v"], num(0)],
            }, mutation={"proccode": "jump %s %s", "argumentids": '["first", "second", "third"]'}),
        }
        code, _ = emit(blocks)
        assert code == 'jump(score, "b", null);\n'


class TestUnsupported:
    @pytest.mark.parametrize("opcode,comment", [
        ("motion_glideto", "// Motion block: motion_glideto"),
        ("looks_changeeffectby", "// Looks block: looks_changeeffectby"),
        ("sound_seteffectto", "// Sound block: sound_seteffectto"),
        ("sensing_setdragmode", "// Sensing block: sensing_setdragmode"),
        ("pen_stamp", "// Pen block: pen_stamp"),
        ("music_playNoteForBeats", "// Unsupported block: music_playNoteForBeats"),
    ])
    def test_categorized_comment(self, emit, block, opcode, comment):
        code, diag = emit({"a": block(opcode)})
        assert code == comment + "\n"
        assert not diag.has_errors()

    def test_indented_inside_body(self, emit, block):
        blocks = {"a": block("control_forever", inputs={"SUBSTACK": [2, "b"]}), "b": block("wedo2_motorOn")}
        code, _ = emit(blocks)
        assert code.splitlines()[1] == "    // Unsupported block: wedo2_motorOn"

    def test_loose_reporter_is_an_expression_statement(self, emit, block):
        code, _ = emit({"a": block("operator_add", inputs={"NUM1": num(1), "NUM2": num(2)})})
        assert code == "1 + 2;\n"


class TestStructuralLimits:
    def test_next_cycle_raises(self, emit, block):
        blocks = {"a": block("looks_show", next="b"), "b": block("looks_hide", next="a")}
        with pytest.raises(StructuralOverflow):
            emit(blocks)

    def test_substack_cycle_raises(self, emit, block):
        blocks = {
            "a": block("control_forever", inputs={"SUBSTACK": [2, "b"]}),
            "b": block("looks_show", next="a"),
        }
        with pytest.raises(StructuralOverflow):
            emit(blocks)

    def test_step_bound(self, block):
        blocks = {f"b{idx}": block("looks_show", next=f"b{idx + 1}") for idx in range(20)}
        graph = GraphModel.build("S", blocks)
        settings = DecompileSettings(max_chain_steps=10)
        gen = StatementGenerator(graph, settings, DiagnosticContext("S"))
        with pytest.raises(StructuralOverflow):
            gen.emit_chain("b0")

    def test_nesting_bound(self, block):
        blocks = {
            f"f{idx}": block("control_forever", inputs={"SUBSTACK": [2, f"f{idx + 1}"]})
            for idx in range(10)
        }
        graph = GraphModel.build("S", blocks)
        gen = StatementGenerator(graph, DecompileSettings(max_nesting=5), DiagnosticContext("S"))
        with pytest.raises(StructuralOverflow):
            gen.emit_chain("f0")

    def test_custom_indent(self, block):
        blocks = {"a": block("control_forever", inputs={"SUBSTACK": [2, "b"]}), "b": block("looks_show")}
        graph = GraphModel.build("S", blocks)
        gen = StatementGenerator(graph, DecompileSettings(indent="\t"), DiagnosticContext("S"))
        assert gen.emit_chain("a") == "while (true) {\n\tlooks.show();\n}\n"

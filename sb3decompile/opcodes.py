import string
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Set

if TYPE_CHECKING:
    from .expressions import ExpressionGenerator
    from .graph_model import Block
    from .statements import StatementGenerator

ExpressionHandler = Callable[["ExpressionGenerator", "Block"], str]
StatementHandler = Callable[["StatementGenerator", "Block", int], List[str]]


class OpcodeRegistry:
    """Maps opcodes to the handlers that turn them into code.

    Reporter opcodes register an expression handler returning expression text.
    Command opcodes register a statement handler returning indented lines.
    Opcodes with neither fall through to the caller's default handling.
    """

    def __init__(self) -> None:
        self.expressions: Dict[str, ExpressionHandler] = {}
        self.statements: Dict[str, StatementHandler] = {}
        # Statement handlers that emit their block's next chain themselves
        self.chain_owners: Set[str] = set()

    def register_expression(self, opcode: str, handler: ExpressionHandler) -> None:
        self.expressions[opcode] = handler

    def register_statement(self, opcode: str, handler: StatementHandler, owns_next: bool = False) -> None:
        self.statements[opcode] = handler
        if owns_next:
            self.chain_owners.add(opcode)
        else:
            self.chain_owners.discard(opcode)

    def expression(self, *opcodes: str) -> Callable[[ExpressionHandler], ExpressionHandler]:
        def decorator(handler: ExpressionHandler) -> ExpressionHandler:
            for opcode in opcodes:
                self.register_expression(opcode, handler)
            return handler
        return decorator

    def statement(self, *opcodes: str, owns_next: bool = False) -> Callable[[StatementHandler], StatementHandler]:
        def decorator(handler: StatementHandler) -> StatementHandler:
            for opcode in opcodes:
                self.register_statement(opcode, handler, owns_next)
            return handler
        return decorator

    def expression_handler(self, opcode: str) -> Optional[ExpressionHandler]:
        return self.expressions.get(opcode)

    def statement_handler(self, opcode: str) -> Optional[StatementHandler]:
        return self.statements.get(opcode)

    def copy(self) -> "OpcodeRegistry":
        clone = OpcodeRegistry()
        clone.expressions = dict(self.expressions)
        clone.statements = dict(self.statements)
        clone.chain_owners = set(self.chain_owners)
        return clone


# Shared registry; expressions.py and statements.py register the built-in handlers
REGISTRY = OpcodeRegistry()


# Binary operators: opcode -> operator token
BINARY_OPERATORS: Dict[str, str] = {
    "operator_equals": "==",
    "operator_gt": ">",
    "operator_greaterthan": ">",
    "operator_lt": "<",
    "operator_lessthan": "<",
    "operator_add": "+",
    "operator_subtract": "-",
    "operator_multiply": "*",
    "operator_divide": "/",
    "operator_mod": "%",
    "operator_and": "&&",
    "operator_or": "||",
}

# Reporter opcodes rendered from a format string.
# Placeholders name an input (rendered as an expression) or a field (quoted).
REPORTER_TEMPLATES: Dict[str, str] = {
    # Operators
    "operator_join": "operation.join({STRING1}, {STRING2})",
    "operator_random": "operation.random({FROM}, {TO})",
    "operator_length": "operation.length({STRING})",
    "operator_letter_of": "operation.letterOf({LETTER}, {STRING})",
    "operator_contains": "operation.contains({STRING1}, {STRING2})",
    "operator_round": "Math.round({NUM})",
    "operator_mathop": "operation.mathop({OPERATOR}, {NUM})",

    # Lists
    "data_itemoflist": "list.getItem({LIST}, {INDEX})",
    "data_lengthoflist": "list.length({LIST})",
    "data_itemnumoflist": "list.indexOf({LIST}, {ITEM})",
    "data_listcontainsitem": "list.contains({LIST}, {ITEM})",

    # Sensing
    "sensing_touchingobject": "sensing.isTouching({TOUCHINGOBJECTMENU})",
    "sensing_keypressed": "sensing.keyPressed({KEY_OPTION})",
    "sensing_mousedown": "sensing.mouseDown()",
    "sensing_mousex": "sensing.mouseX()",
    "sensing_mousey": "sensing.mouseY()",
    "sensing_answer": "sensing.answer()",
    "sensing_timer": "sensing.timer()",
    "sensing_loudness": "sensing.loudness()",
    "sensing_username": "sensing.username()",
    "sensing_distanceto": "sensing.distanceTo({DISTANCETOMENU})",

    # Motion / Looks / Sound
    "motion_xposition": "motion.xPosition()",
    "motion_yposition": "motion.yPosition()",
    "motion_direction": "motion.direction()",
    "looks_size": "looks.size()",
    "looks_costumenumbername": "looks.costume({NUMBER_NAME})",
    "looks_backdropnumbername": "looks.backdrop({NUMBER_NAME})",
    "sound_volume": "sound.volume()",
}

# Command opcodes rendered from a format string; a ";" is appended
COMMAND_TEMPLATES: Dict[str, str] = {
    # Events
    "event_broadcast": "event.broadcast({BROADCAST_INPUT})",
    "event_broadcastandwait": "event.broadcastAndWait({BROADCAST_INPUT})",

    # Motion
    "motion_movesteps": "motion.moveSteps({STEPS})",
    "motion_turnright": "motion.turnRight({DEGREES})",
    "motion_turnleft": "motion.turnLeft({DEGREES})",
    "motion_gotoxy": "motion.goTo({X}, {Y})",
    "motion_changexby": "motion.changeX({DX})",
    "motion_changeyby": "motion.changeY({DY})",
    "motion_setx": "motion.setX({X})",
    "motion_sety": "motion.setY({Y})",
    "motion_pointindirection": "motion.pointInDirection({DIRECTION})",
    "motion_glidesecstoxy": "motion.glideTo({SECS}, {X}, {Y})",
    "motion_ifonedgebounce": "motion.ifOnEdgeBounce()",

    # Looks
    "looks_say": "looks.say({MESSAGE})",
    "looks_sayforsecs": "looks.sayForSeconds({MESSAGE}, {SECS})",
    "looks_think": "looks.think({MESSAGE})",
    "looks_thinkforsecs": "looks.thinkForSeconds({MESSAGE}, {SECS})",
    "looks_show": "looks.show()",
    "looks_hide": "looks.hide()",
    "looks_switchcostumeto": "looks.switchCostumeTo({COSTUME})",
    "looks_nextcostume": "looks.nextCostume()",
    "looks_switchbackdropto": "looks.switchBackdropTo({BACKDROP})",
    "looks_nextbackdrop": "looks.nextBackdrop()",
    "looks_setsizeto": "looks.setSizeTo({SIZE})",
    "looks_changesizeby": "looks.changeSizeBy({CHANGE})",

    # Sound
    "sound_play": "sound.playSound({SOUND_MENU})",
    "sound_playuntildone": "sound.playSoundUntilDone({SOUND_MENU})",
    "sound_stopallsounds": "sound.stopAllSounds()",
    "sound_changevolumeby": "sound.changeVolumeBy({VOLUME})",
    "sound_setvolumeto": "sound.setVolumeTo({VOLUME})",

    # Control
    "control_wait": "control.wait({DURATION})",
    "control_stop": "control.stop({STOP_OPTION})",
    "control_create_clone_of": "control.createCloneOf({CLONE_OPTION})",
    "control_delete_this_clone": "control.deleteThisClone()",

    # Sensing
    "sensing_askandwait": "sensing.askAndWait({QUESTION})",
    "sensing_resettimer": "sensing.resetTimer()",

    # Lists
    "data_addtolist": "list.addItem({LIST}, {ITEM})",
    "data_deletealloflist": "list.deleteAllOfList({LIST})",
    "data_deleteoflist": "list.deleteItem({LIST}, {INDEX})",
    "data_replaceitemoflist": "list.replace({LIST}, {INDEX}, {ITEM})",
    "data_insertatlist": "list.insert({LIST}, {INDEX}, {ITEM})",
}

# Hat blocks become a comment; their chain follows at the same indentation
HAT_COMMENTS: Dict[str, str] = {
    "event_whenflagclicked": "// When green flag clicked",
    "event_whenkeypressed": "// When [{KEY_OPTION}] key pressed",
    "event_whenthisspriteclicked": "// When this sprite clicked",
    "event_whenstageclicked": "// When stage clicked",
    "event_whenbroadcastreceived": "// When I receive [{BROADCAST_OPTION}]",
    "event_whenbackdropswitchesto": "// When backdrop switches to [{BACKDROP}]",
    "control_start_as_clone": "// When I start as a clone",
}

SUBSTACK_INPUTS = ("SUBSTACK", "substack")
SUBSTACK2_INPUTS = ("SUBSTACK2", "substack2")


def template_placeholders(template: str) -> List[str]:
    return [fname for _, fname, _, _ in string.Formatter().parse(template) if fname]

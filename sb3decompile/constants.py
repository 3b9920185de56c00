"""Constants and tunable settings used throughout the blocks-to-code conversion."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Tuple

# One level of indentation in generated code
INDENT = "    "

# Variables whose name starts with this marker are cloud variables and are never declared
CLOUD_PREFIX = "☁"

CODE_HEADER = "// Decompiled from Scratch project"
MAIN_CODE_HEADER = "// Main code"
NO_BLOCKS_COMMENT = "// No blocks found"

# Compatibility shims carried over from the migration tool this converter replaces.
# Conventionally named loop/accumulator variables get these initial values when a
# sprite never declares them. Unlike the migration tool, which only initialized the
# names it found on blocks, every actor gets all of them, including a stage with
# no blocks. Whether every project needs them is unconfirmed, so they can be
# overridden or disabled through DecompileSettings.
DEFAULT_FALLBACK_VARIABLES: Dict[str, Any] = {
    "len": 0,
    "i": 1,
    "j": 1,
    "k": 1,
    "result": "",
    "separator": "",
    "current": "",
    "next": "",
}

# A list with this name and no stored items is seeded with SEEDED_LIST_VALUES
SEEDED_LIST_NAME = "numbers"
SEEDED_LIST_VALUES: Tuple[int, ...] = tuple(range(1, 11))

# String literals matching one of these names are emitted as bare identifiers
FREE_VARIABLE_NAMES: FrozenSet[str] = frozenset(
    {"i", "j", "k", "len", "current", "next", "result", "separator"}
)

# Traversal bounds for malformed or cyclic block graphs. MAX_CHAIN_STEPS applies
# to each entry chain. MAX_NESTING counts statement bodies and reporters together
# and must stay well below sys.getrecursionlimit().
MAX_CHAIN_STEPS = 10000
MAX_NESTING = 100

# Opcode prefixes that get a categorized comment when no handler exists
UNSUPPORTED_CATEGORIES: List[Tuple[str, str]] = [
    ("motion_", "Motion"),
    ("looks_", "Looks"),
    ("sound_", "Sound"),
    ("sensing_", "Sensing"),
    ("pen_", "Pen"),
]

# Opcodes that represent menu shadow blocks
MENU_SHADOW_OPCODES = {
    "looks_costume",
    "looks_backdrops",
    "sound_sounds_menu",
    "pen_menu_colorParam",
    "sensing_keyoptions",
    "sensing_distancetomenu",
    "sensing_of_object_menu",
    "motion_goto_menu",
    "motion_glideto_menu",
    "motion_pointtowards_menu",
    "control_create_clone_of_menu",
    "sensing_touchingobjectmenu",
}


@dataclass
class DecompileSettings:
    """Overridable knobs for one conversion run."""
    indent: str = INDENT
    fallback_variables: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_FALLBACK_VARIABLES))
    seeded_list_name: str = SEEDED_LIST_NAME
    seeded_list_values: Tuple[Any, ...] = SEEDED_LIST_VALUES
    free_variable_names: FrozenSet[str] = FREE_VARIABLE_NAMES
    max_chain_steps: int = MAX_CHAIN_STEPS
    max_nesting: int = MAX_NESTING

"""In-memory view of one actor's block graph and declarations."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from .constants import CLOUD_PREFIX


@dataclass(frozen=True)
class Block:
    block_id: str
    opcode: str
    fields: Dict[str, Any] = field(default_factory=dict)
    inputs: Dict[str, Any] = field(default_factory=dict)
    mutation: Dict[str, Any] = field(default_factory=dict)
    next: Optional[str] = None
    parent: Optional[str] = None
    shadow: bool = False
    top_level: bool = False

    def field_value(self, name: str, default: Any = None) -> Any:
        value = self.fields.get(name)
        return default if value is None else value

    def input_ref(self, name: str) -> Optional[str]:
        """Return the block id an input points at, if it points at one."""
        return input_block_ref(self.inputs.get(name))

    def mutation_list(self, *keys: str) -> List[Any]:
        """Read a list-valued mutation entry stored either as a list or a JSON string."""
        for key in keys:
            raw = self.mutation.get(key)
            if raw is None:
                continue
            if isinstance(raw, list):
                return raw
            if isinstance(raw, str):
                try:
                    parsed = json.loads(raw)
                except json.JSONDecodeError:
                    continue
                if isinstance(parsed, list):
                    return parsed
        return []


def input_block_ref(input_data: Any) -> Optional[str]:
    if isinstance(input_data, list) and len(input_data) >= 2 and isinstance(input_data[1], str):
        return input_data[1]
    return None


def _field_literal(raw: Any) -> Any:
    # Scratch stores fields as [value, id]
    if isinstance(raw, list):
        return raw[0] if raw else None
    return raw


def parse_block(block_id: str, raw: Mapping[str, Any]) -> Block:
    fields = raw.get("fields") or {}
    inputs = raw.get("inputs") or {}
    mutation = raw.get("mutation") or {}
    next_id = raw.get("next")
    return Block(
        block_id=block_id,
        opcode=str(raw.get("opcode") or ""),
        fields={name: _field_literal(val) for name, val in fields.items()} if isinstance(fields, dict) else {},
        inputs=dict(inputs) if isinstance(inputs, dict) else {},
        mutation=dict(mutation) if isinstance(mutation, dict) else {},
        next=next_id if isinstance(next_id, str) else None,
        parent=raw.get("parent") if isinstance(raw.get("parent"), str) else None,
        shadow=bool(raw.get("shadow", False)),
        top_level=bool(raw.get("topLevel", False)),
    )


def _declaration_pairs(raw: Any) -> Iterable[Any]:
    if isinstance(raw, dict):
        return raw.values()
    if isinstance(raw, list):
        return raw
    return []


def normalize_declarations(raw: Any, default: Any, skip_cloud: bool = False) -> Dict[str, Any]:
    """Normalize [name, value] pairs given as a sequence or an id-keyed mapping.

    Returns an insertion-ordered mapping of name -> initial value.
    """
    result: Dict[str, Any] = {}
    for pair in _declaration_pairs(raw):
        if not isinstance(pair, list) or not pair or not pair[0]:
            continue
        name = str(pair[0])
        if skip_cloud and (name.startswith(CLOUD_PREFIX) or (len(pair) >= 3 and pair[2] is True)):
            continue
        value = pair[1] if len(pair) > 1 and pair[1] is not None else default
        if isinstance(default, list):
            value = list(value) if isinstance(value, list) else []
        result[name] = value
    return result


@dataclass(frozen=True)
class GraphModel:
    name: str
    blocks: Dict[str, Block]
    variables: Dict[str, Any]
    lists: Dict[str, List[Any]]
    broadcasts: List[str] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        name: str,
        blocks: Any,
        variables: Any = None,
        lists: Any = None,
        broadcasts: Any = None,
    ) -> "GraphModel":
        parsed: Dict[str, Block] = {}
        if isinstance(blocks, dict):
            for block_id, raw in blocks.items():
                # Compact top-level reporters are stored as arrays, not block records
                if isinstance(raw, dict):
                    parsed[block_id] = parse_block(block_id, raw)
        broadcast_names: List[str] = []
        if isinstance(broadcasts, dict):
            broadcast_names = [str(b) for b in broadcasts.values()]
        elif isinstance(broadcasts, list):
            broadcast_names = [str(b) for b in broadcasts]
        return cls(
            name=name,
            blocks=parsed,
            variables=normalize_declarations(variables, "", skip_cloud=True),
            lists=normalize_declarations(lists, []),
            broadcasts=broadcast_names,
        )

    @classmethod
    def from_target(cls, target: Mapping[str, Any]) -> "GraphModel":
        default_name = "Stage" if target.get("isStage") else "Sprite"
        return cls.build(
            name=target.get("name") or default_name,
            blocks=target.get("blocks", {}),
            variables=target.get("variables", {}),
            lists=target.get("lists", {}),
            broadcasts=target.get("broadcasts", {}),
        )

    def get(self, block_id: Optional[str]) -> Optional[Block]:
        if not block_id:
            return None
        return self.blocks.get(block_id)

    def find_next_cycle(self) -> Optional[str]:
        """Return the id of a block on a cyclic next chain, or None."""
        finished: Set[str] = set()
        for start in self.blocks:
            path: Set[str] = set()
            current: Optional[str] = start
            while current and current in self.blocks and current not in finished:
                if current in path:
                    return current
                path.add(current)
                current = self.blocks[current].next
            finished.update(path)
        return None

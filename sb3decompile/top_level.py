from typing import List, Set

from .graph_model import GraphModel, input_block_ref

# Hat opcodes: event_whenflagclicked, event_whenbroadcastreceived, ...
EVENT_HAT_PREFIX = "event_when"


def is_event_hat(opcode: str) -> bool:
    return opcode.startswith(EVENT_HAT_PREFIX)


def collect_child_ids(graph: GraphModel) -> Set[str]:
    """Ids referenced as an input value or as another block's next."""
    children: Set[str] = set()
    for block in graph.blocks.values():
        for input_data in block.inputs.values():
            ref = input_block_ref(input_data)
            if ref:
                children.add(ref)
        if block.next:
            children.add(block.next)
    return children


def find_top_level_blocks(graph: GraphModel) -> List[str]:
    """Return entry block ids in block-map order.

    Event hats always start their own chain, even when some other block
    happens to reference them.
    """
    children = collect_child_ids(graph)
    return [
        block_id
        for block_id, block in graph.blocks.items()
        if block_id not in children or is_event_hat(block.opcode)
    ]

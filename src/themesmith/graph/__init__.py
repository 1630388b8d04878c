from .runner import Composite, Leaf, Mode, Node, Task, as_node, concurrent, describe, run, sequence

__all__ = [
    "Composite",
    "Leaf",
    "Mode",
    "Node",
    "Task",
    "as_node",
    "concurrent",
    "describe",
    "run",
    "sequence",
]

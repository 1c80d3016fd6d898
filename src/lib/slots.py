"""
Slot binder

Partitions the child stream of one directive body into named slots:

    ::card
    Intro            → default
    #title
    A                → title
    #description
    B                → description
    ::

Slot markers only affect the body they appear in; nested directives get
their own binder.
"""

from typing import Dict, List, Optional

from ..models.errors import ErrorKind, ParseError
from ..models.nodes import DEFAULT_SLOT, Node


class SlotBinder:
    """
    Accumulates children of a single directive body

    Attributes:
        kind: Owning directive kind (for error messages)
        current: Slot receiving new children (None until content or a marker)
        slots: Slot name -> children, in declaration order
    """

    def __init__(self, kind: str):
        self.kind = kind
        self.current: Optional[str] = None
        self.slots: Dict[str, List[Node]] = {}

    def marker_open(self, name: str, line: int) -> None:
        """
        Start a new named slot

        Args:
            name: Slot name from the '#name' marker
            line: Marker line (for error reporting)

        Raises:
            ParseError(DuplicateSlot): If the slot was already defined in this
                body, including a '#default' after unlabeled content
        """
        if name in self.slots:
            raise ParseError.single(
                ErrorKind.DUPLICATE_SLOT,
                line,
                f"Slot '{name}' is defined more than once in '{self.kind}'",
            )
        self.slots[name] = []
        self.current = name

    def child_append(self, node: Node) -> None:
        """Route a child into the current slot (default before any marker)"""
        if self.current is None:
            self.current = DEFAULT_SLOT
            self.slots[DEFAULT_SLOT] = []
        self.slots[self.current].append(node)

    def slots_bind(self) -> Dict[str, List[Node]]:
        """Finished slot mapping"""
        return {name: list(children) for name, children in self.slots.items()}

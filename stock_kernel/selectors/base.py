"""
Module: stock_kernel.selectors.base
Responsibility: Abstract base class for all read-only selectors.  Selectors
    form the read side of the kernel: structured access to a FactoryState
    snapshot without any mutation capability.
Architecture position: Kernel > Selectors.  May import from domain/.
    MUST NOT import from engines, services, or config.

Invariants enforced:
    - Read-only access: a selector holds one snapshot and never produces a
      new one.
    - DTO return convention: selectors return frozen dataclasses or plain
      values, never pool objects that could be fed back into the engine.
"""

from abc import ABC

from stock_kernel.domain.state import FactoryState, PlantParameters


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a snapshot from the caller and return DTOs or
        computed results.  Two calls on the same selector always agree,
        because the snapshot is immutable.
    """

    def __init__(self, state: FactoryState, parameters: PlantParameters | None = None):
        self.state = state
        self.parameters = parameters or PlantParameters()

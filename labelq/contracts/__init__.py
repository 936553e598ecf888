"""
Type Contracts for LabelQ

Protocol-based interfaces for the collaborators the smart label engine
consumes: rule storage, the classification gateway, the label applier and
the inbox thread source.
"""

from labelq.contracts.collaborators import (
    ClassificationGateway,
    InboxThreadSource,
    LabelApplier,
    RuleStore,
)

__all__ = [
    "ClassificationGateway",
    "InboxThreadSource",
    "LabelApplier",
    "RuleStore",
]

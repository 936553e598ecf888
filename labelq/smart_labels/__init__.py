"""Smart labels - hybrid criteria + AI classification and application"""

from labelq.smart_labels.backfill import BackfillProcessor
from labelq.smart_labels.matcher import SmartLabelMatcher
from labelq.smart_labels.realtime import RealtimeApplicator
from labelq.smart_labels.service import (
    SmartLabelService,
    apply_smart_labels_to_messages,
    backfill_smart_labels,
    match_smart_labels,
)

__all__ = [
    "BackfillProcessor",
    "RealtimeApplicator",
    "SmartLabelMatcher",
    "SmartLabelService",
    "apply_smart_labels_to_messages",
    "backfill_smart_labels",
    "match_smart_labels",
]

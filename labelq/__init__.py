"""LabelQ - hybrid criteria + AI smart labels for email threads"""

from __future__ import annotations

__version__ = "0.1.0"

_SMART_LABEL_EXPORTS = (
    "SmartLabelService",
    "apply_smart_labels_to_messages",
    "backfill_smart_labels",
    "match_smart_labels",
)


# Lazy imports so `import labelq` doesn't pull in pydantic/SQLite/Gemini
def __getattr__(name: str):
    if name in _SMART_LABEL_EXPORTS:
        from labelq.smart_labels import service

        return getattr(service, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["__version__", *_SMART_LABEL_EXPORTS]

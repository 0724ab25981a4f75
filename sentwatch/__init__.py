"""SentWatch - relay summaries of sent Gmail messages to WhatsApp contacts"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports so lightweight modules (summary, stores) load without google/httpx
def __getattr__(name: str):
    """
    Lazy imports to avoid loading heavy dependencies when only importing lightweight modules.
    """
    if name in ("RelayPipeline", "RelayOutcome"):
        from sentwatch.relay import pipeline

        if name == "RelayPipeline":
            return pipeline.RelayPipeline
        if name == "RelayOutcome":
            return pipeline.RelayOutcome

    if name == "RelayContext":
        from sentwatch.relay.context import RelayContext

        return RelayContext

    if name == "summarize":
        from sentwatch.relay.summary import summarize

        return summarize

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "RelayContext",
    "RelayOutcome",
    "RelayPipeline",
    "summarize",
]

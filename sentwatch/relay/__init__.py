"""Relay core: poller, summary generator, pipeline, scheduler, context."""

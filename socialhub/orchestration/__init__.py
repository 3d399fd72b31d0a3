"""Orchestration layer - composes the kernel engines per request."""

from socialhub.orchestration.content_orchestrator import ContentOrchestrator

__all__ = [
    "ContentOrchestrator",
]

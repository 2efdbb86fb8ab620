"""
Console Wrapper Updater Module.

Local artifact storage and the update state machine.
"""

__all__ = ["ArtifactStore", "UpdateOrchestrator"]

from console_wrapper.updater.orchestrator import UpdateOrchestrator
from console_wrapper.updater.storage import ArtifactStore

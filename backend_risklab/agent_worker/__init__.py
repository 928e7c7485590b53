"""
Agent worker package: background work off the request path.

EventWriter persists risk events on a thread pool so scoring responses
never wait on (or fail because of) the event store.
"""

from backend_risklab.agent_worker.event_writer import EventWriter

__all__ = ["EventWriter"]

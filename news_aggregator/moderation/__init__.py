"""Content moderation - the gate used by the comments service and the service it calls."""

from .gate import ModerationGate, Verdict

__all__ = ["ModerationGate", "Verdict"]

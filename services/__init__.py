from .session_counter import SessionCounter, CounterState

# Services that talk to the database are imported directly where needed.

__all__ = ["SessionCounter", "CounterState"]

from .listeners import ListenerRegistry

__all__ = ["ListenerRegistry"]

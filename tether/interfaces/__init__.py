from .event_sink import EventSink

__all__ = ["EventSink"]

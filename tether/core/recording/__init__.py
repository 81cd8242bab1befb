from .async_writer import AsyncWriter
from .events import EventTraceLogger

__all__ = ["AsyncWriter", "EventTraceLogger"]

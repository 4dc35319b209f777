from .log_sink import Callback, LogSink

__all__ = ["Callback", "LogSink"]

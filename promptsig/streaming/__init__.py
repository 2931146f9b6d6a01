from .reassembler import StreamReassembler, StreamState

__all__ = ["StreamReassembler", "StreamState"]

"""Reader-writer mutexes with guards and a throughput benchmark."""

__version__ = "0.1.0"
__all__ = ["bench", "gated", "guards", "packed"]
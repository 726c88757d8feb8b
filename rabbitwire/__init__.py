"""AMQP 0-9-1 wire-level building blocks: field tables, URLs, deadlines, sockets and pipelines."""

__version__ = "0.1.0"

__all__ = ["codec", "errors", "process", "table", "tcp_socket", "timing", "url"]
"""Lite-server client: network config, handshake cryptography, packet parsing, connections and the connection pool."""

__all__ = ["config", "connection", "crypto", "parse", "pool"]
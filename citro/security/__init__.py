"""Security - role capabilities and session lookup helpers."""

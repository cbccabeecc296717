"""Adaptadores de I/O: HTTP (httpx) y archivos JSON."""

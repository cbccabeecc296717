"""Núcleo: dominio, configuración y contratos (sin I/O)."""

"""Core: configuración, errores y modelos del dominio (sin I/O)."""

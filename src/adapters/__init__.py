"""Adaptadores de I/O: HTTP contra AbuseIPDB y exportación a disco."""

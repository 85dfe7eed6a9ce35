from .logger import AuditEntry, AuditLogger

__all__ = ["AuditEntry", "AuditLogger"]

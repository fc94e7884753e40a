"""
Core interfaces - contracts for pluggable backends.
"""

from .email import DeliveryReceipt, EmailBackend, OutgoingEmail

__all__ = ["DeliveryReceipt", "EmailBackend", "OutgoingEmail"]

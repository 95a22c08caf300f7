"""
Backoffice Kernel

Shared primitives for the back-office calculation core:
- Typed exceptions with machine-readable codes
- Structured JSON logging with context propagation
- Injectable clock
- Currency registry and Decimal money values
- Key-value persistence plumbing for client-side drafts
"""

__version__ = "0.1.0"

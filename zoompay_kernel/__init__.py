"""
Zoompay Kernel

Core of the expense approval and payment disbursement workflow:
- Typed, coded exceptions
- Structured JSON logging
- Pure workflow types and transition resolution
- Document store and blob store adapters
"""

__version__ = "0.1.0"

"""
Stock Kernel

The stock ledger of an expanded-polystyrene moulding line:
- Raw material, silo and finished-goods stock pools
- Append/replace/remove ledger records per process step
- Compensating reversal on every edit and delete
- Append-only audit trail
- One immutable snapshot value, persisted wholesale as JSON
"""

__version__ = "0.1.0"

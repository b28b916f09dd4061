"""BloodLink: donor matching and donation ledger."""

__version__ = "0.1.0"

"""
fieldrec — schema-driven field reconciliation for stored configuration and credential records.

Subpackages
- fieldrec.core — zero-IO engine (schema, reconcile, aliases, projection).
- fieldrec.io — storage collaborator (in-memory and file-backed key/value stores, settings).
- fieldrec.users — reference user-entry backend wiring the core to storage.
"""

__version__ = "0.1.0"

"""
Directory Reconciliation

Pulls client records from the directory-of-record and merges them into the local store:
reference caches, identity resolution, record transformation, idempotent upsert,
assignment and vendor-link reconciliation, trust-center enrichment.
"""

"""
Core business logic modules for the Jobboard ATS.

Submodules:
- tracking: Interaction record state machine and application service
- visibility: Role-based projection and leak guard
- audit: Audit trail and administrative entity deletion
- matching: Saved-search matching and job alerts
"""

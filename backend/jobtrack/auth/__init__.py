# jobtrack/auth/__init__.py
"""
Authentication modules for Job Tracker.

This package contains:
- identity.py: Canonical authenticated identity model
- gate.py: Bearer token verification and identity resolution for protected routes
"""
from jobtrack.auth.gate import AccessGate, GateResult, IdentityResolver
from jobtrack.auth.identity import Identity

__all__ = ["AccessGate", "GateResult", "Identity", "IdentityResolver"]

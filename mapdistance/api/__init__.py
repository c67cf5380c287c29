"""MapDistance API adapter package.

Architectural role:
- Defines the external interaction boundary (HTTP, interactive CLI, one-shot CLI).
- Performs transport-level validation and response shaping.
- Delegates validation and model calls to `mapdistance.core.shell`.
"""

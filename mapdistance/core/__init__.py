"""Core package.

Architectural role:
    Sits between the API/CLI entrypoints and the Gemini transport.

Composition:
    - `types`: query/result data contracts and format profiles.
    - `errors`: user-facing error taxonomy with fixed messages.
    - `adapter`: single grounded request plus response normalization.
    - `shell`: form state, validation and stale-response suppression.
"""

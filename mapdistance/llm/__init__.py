"""Gemini access package.

Architectural role:
    Provides runtime configuration and the HTTP transport used by the result
    adapter to reach the Gemini generative model.

Module split:
    - `provider_config`: environment-driven settings and key resolution.
    - `client`: single-attempt `generateContent` transport.
"""

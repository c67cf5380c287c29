"""Device location package.

Provides the one-shot coordinate lookup used by the shell at startup.
"""

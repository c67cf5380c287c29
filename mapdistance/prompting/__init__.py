"""Prompting package.

Deterministic instruction builders for the prose and terse distance formats.
It does not perform validation, payload assembly or model invocation.
"""

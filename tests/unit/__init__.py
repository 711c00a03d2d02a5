"""Unit tests.

Purpose
- Verify a single module/class/function in isolation.

Guidelines
- No real I/O; persistence goes through `InMemorySelectionRepository`.
- Assert on selections and messages, not on how the engine computes them.
- Keep tests small, fast, and deterministic.
"""

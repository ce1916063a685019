"""Person API Package: enriches person records through a resilient external call.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""

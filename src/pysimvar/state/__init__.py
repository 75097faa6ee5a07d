"""State layer.

The variable store is the single source of truth for SimVar values; only
rule application (driven by the engine) and explicit debug pokes mutate it.
"""

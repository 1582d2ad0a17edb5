"""
Core value types, domain models, pricing primitives and payload contracts.

Everything here is immutable and free of I/O; the stateful engine lives
in rmm_sim.engine.
"""

"""
Test suite for rmm_sim

Contains:
- tests/unit/          : Unit tests for individual modules
"""

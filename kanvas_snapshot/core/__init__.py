"""
Core components shared by the snapshot pipeline.

This package contains the configuration layer, the error taxonomy, the
request models and the pipeline state machine.
"""

__all__ = []

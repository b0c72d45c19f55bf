"""Whole-grid pipeline stages: voting, topology (seal + segment), despeckle.

Each stage is a deterministic function of the complete grid produced by the
previous one.
"""

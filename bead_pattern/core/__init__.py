"""bead_pattern.core — Foundation layer.

Contains colour conversion, the palette table, shared types, image decoding,
configuration and report formatting. This package has NO dependencies on
bead_pattern.metrics, bead_pattern.stages or bead_pattern.registry.
Only stdlib, numpy, and PIL are allowed here.
"""

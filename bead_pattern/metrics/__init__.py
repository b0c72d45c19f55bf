"""Auto-discovery of colour metric modules.

Every .py file in this package that defines a module-level `metric` object of
type ColourMetric is registered by bead_pattern.registry.discover(). The
module docstring is the metric's documentation (`bead-pattern help <metric>`).
"""

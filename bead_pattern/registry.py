"""Colour metric auto-discovery and registration.

Scans bead_pattern/metrics/ for modules that define a `metric` object of
type ColourMetric. Collects them into a dict keyed by name.
"""

import importlib
import pkgutil

from bead_pattern.core.types import ColourMetric

_registry: dict[str, ColourMetric] = {}


def discover() -> dict[str, ColourMetric]:
    """Import all metric modules and return the registry."""
    if _registry:
        return _registry

    import bead_pattern.metrics as pkg

    for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__):
        if modname.startswith('_'):
            continue
        module = importlib.import_module(f'bead_pattern.metrics.{modname}')
        found = getattr(module, 'metric', None)
        if isinstance(found, ColourMetric):
            _registry[found.name] = found

    return _registry


def get(name: str) -> ColourMetric:
    """Get a metric by name."""
    reg = discover()
    if name not in reg:
        raise KeyError(f'Unknown metric: {name}. Available: {", ".join(sorted(reg))}')
    return reg[name]


def all_metrics() -> dict[str, ColourMetric]:
    """Return all registered metrics."""
    return discover()


def load_metric_module(name: str) -> object:
    """Load the raw module for a metric (for docstring access)."""
    return importlib.import_module(f'bead_pattern.metrics.{get(name).name}')

"""Pan/pinch-zoom crop component: fit/clamp engine, pyvips crop backend, Qt controller."""

__version__ = "0.1.0"

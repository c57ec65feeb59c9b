"""pyckit - JAX-backed circuit engine for interactive circuit building.

Layers:
    - mna: linear DC solve (Modified Nodal Analysis)
    - transient: trapezoidal companion models and adaptive sub-stepping
    - circuit: network building and per-frame analysis

Usage:
    from pyckit.circuit import Network, Battery, R, C, L, Switch, ...
"""

import jax

jax.config.update("jax_enable_x64", True)

from .options import AnalysisOptions  # noqa: E402

__version__ = "0.1.0"
__all__ = ["mna", "transient", "circuit", "AnalysisOptions", "__version__"]

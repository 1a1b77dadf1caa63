"""Bootstrap (composition root) for fixtureguard.

Wires the concrete adapters into the coordinator and controller from
settings. Entry points (the pytest plugin, the CLI) import this package;
inner layers must not.
"""

from .bootstrap import GuardContainer, bootstrap, build_container

__all__ = ["GuardContainer", "bootstrap", "build_container"]

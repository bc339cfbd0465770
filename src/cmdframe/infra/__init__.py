"""Infrastructure layer: default collaborator adapters.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Each adapter satisfies one protocol from :mod:`cmdframe.core.protocols`.
"""

from cmdframe.infra.argparse_parser import ArgparseFlagParser
from cmdframe.infra.config_reader import EnvironmentConfigReader, MappingConfigReader, env_var_for
from cmdframe.infra.event_hub import InMemoryEventHub, default_event_hub

__all__: list[str] = [
    "ArgparseFlagParser",
    "EnvironmentConfigReader",
    "InMemoryEventHub",
    "MappingConfigReader",
    "default_event_hub",
    "env_var_for",
]

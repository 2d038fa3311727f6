# Namespace for pipeline steps
from .parse_connections import ParseConnections  # noqa: F401
from .aggregate_network import AggregateNetwork  # noqa: F401

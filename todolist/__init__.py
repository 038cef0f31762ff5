"""Single-list todo manager: REST service over Redis and a terminal client."""

__version__ = "0.1.0"

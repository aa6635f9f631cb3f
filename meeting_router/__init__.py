"""Meeting Router - picks the agents a booked meeting can be routed to."""

__version__ = "1.0.0"

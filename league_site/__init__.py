"""League site backend: season grouping, aggregation and rankings over the league's records."""

__version__ = "0.1.0"

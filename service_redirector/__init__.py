"""Service redirector - send humans to dynamically placed services by name."""

__version__ = "0.1.0"

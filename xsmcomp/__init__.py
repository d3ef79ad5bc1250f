"""Code generators that turn SPL and ExpL syntax trees into XSM assembly."""

__version__ = "0.1.0"
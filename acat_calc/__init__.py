"""Cash-flow and sub-total calculations for agricultural loan assessment forms."""

__version__ = "0.1.0"

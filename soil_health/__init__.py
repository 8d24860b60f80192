"""Interactive Soil Health Map backend."""

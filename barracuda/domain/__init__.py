"""Domain layer: value types and pure calculators."""

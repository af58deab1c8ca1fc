"""Domain layer: business rules and pipelines of the order catalog."""

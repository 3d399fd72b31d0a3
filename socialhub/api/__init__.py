"""HTTP layer: routes, dependencies and response shaping."""

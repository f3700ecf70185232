"""Plugin version models, parsing and resolution."""

"""Models, configuration and errors."""

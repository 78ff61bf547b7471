"""Output helpers consuming collected story packages."""

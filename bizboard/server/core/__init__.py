"""Server core: configuration, constants and database dependencies."""

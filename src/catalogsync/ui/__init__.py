"""User interfaces over the application services."""

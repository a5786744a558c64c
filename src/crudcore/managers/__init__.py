"""Model and response managers."""

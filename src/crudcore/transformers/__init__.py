"""Model transformers and JSON:API serialization."""

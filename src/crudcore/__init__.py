"""crudcore: generic CRUD managers over SQLAlchemy models with JSON:API output."""

__version__ = "0.1.0"

"""HTTP surface: generic CRUD routers, error handlers and the app factory.

Controllers stay thin: they read request parameters, call the model manager and
hand its result to the response manager. No SQLAlchemy queries live here.
"""

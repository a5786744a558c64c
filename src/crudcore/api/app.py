"""Application factory serving the bundled resources."""

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI

from ..config.loader import get_manager_settings, load_config, merge_defaults
from ..database.schema import Post, User
from ..database.sqlite_client import get_engine, get_session_factory, session_dependency
from ..utils.logging import configure_logging, get_logger
from .controller import crud_router
from .errors import setup_error_handling

logger = get_logger(__name__)


def create_app(config: Optional[Dict[str, Any]] = None, config_path: Optional[Path] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        config: Already loaded configuration; loaded from config_path when None
        config_path: Optional YAML config path
    """
    if config is None:
        config = load_config(config_path)
    else:
        config = merge_defaults(config)

    configure_logging(config["logging"]["level"])

    engine = get_engine(config["database"]["url"], echo=bool(config["database"].get("echo")))
    get_session = session_dependency(get_session_factory(engine))
    settings = get_manager_settings(config)

    app = FastAPI(title="crudcore", version="0.1.0")
    app.state.engine = engine
    setup_error_handling(app)

    app.include_router(crud_router(User, get_session, settings), prefix="/users", tags=["Users"])
    app.include_router(crud_router(Post, get_session, settings), prefix="/posts", tags=["Posts"])

    logger.info("crudcore app ready on %s", engine.url.render_as_string(hide_password=True))
    return app

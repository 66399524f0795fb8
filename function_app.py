import os
import logging
import azure.functions as func

from src.function_blueprints.artworks_blueprint import bp as artworks_bp
from src.function_blueprints.render_blueprint import bp as render_bp
from src.function_blueprints.upload_logo_blueprint import bp as upload_logo_bp

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)


def _configure_logging() -> None:
    lvl = (os.getenv("AZURE_SDK_LOG_LEVEL") or "").upper()
    if lvl:
        level = getattr(logging, lvl, logging.INFO)
        logging.getLogger("azure").setLevel(level)
    app_level = (os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.getLogger("artgen").setLevel(getattr(logging, app_level, logging.INFO))
    # PIL logs every font/plugin probe at DEBUG
    logging.getLogger("PIL").setLevel(logging.INFO)


_configure_logging()

app.register_functions(upload_logo_bp)
app.register_functions(artworks_bp)
app.register_functions(render_bp)

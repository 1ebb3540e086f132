"""Main entrypoint for the Finance Tracker API.

Exposes the application built by ``app.main.create_app`` and runs it with Uvicorn when executed directly (``python main.py`` or ``uv run main.py``). Host, port, store URL and allowed client origin all come from the environment or a ``.env`` file.
"""

from app.core.settings import get_settings
from app.main import app, create_app  # noqa: F401

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.port)

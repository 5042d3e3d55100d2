"""ASGI entry point configured from the environment.

    DEVSERVER_ROOT=site uvicorn devserver.asgi:app --port 4000

Only the file server runs this way; the live-reload channel needs the
``devserver`` command.
"""

from .config import config_from_env
from .main import create_app

app = create_app(config_from_env())

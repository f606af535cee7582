# server/wsgi.py
# gunicorn --chdir server wsgi:app

import os

from biolink import create_app

app = create_app(os.environ.get("FLASK_ENV", "production"))

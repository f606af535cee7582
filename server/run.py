# server/run.py

import os

from biolink import create_app
from biolink.config import config_by_name

env = os.environ.get("FLASK_ENV", "development")
if env not in config_by_name:
    raise SystemExit(f"Unknown FLASK_ENV '{env}', expected one of: {', '.join(config_by_name)}")

app = create_app(env)

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    host = os.environ.get("HOST", "127.0.0.1")
    debug = bool(app.config.get("DEBUG"))

    print(f"\n[Biolink] {env} server on http://{host}:{port} (debug={debug})")
    print(f"[Biolink] Metadata cache: {'redis' if app.config.get('REDIS_URL') else 'disabled'}")
    print("[Biolink] For production, use: gunicorn wsgi:app\n")

    app.run(host=host, port=port, debug=debug)

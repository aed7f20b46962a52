# server/run.py

import os
from savekar import create_app

env = os.environ.get("FLASK_ENV", "development")
app = create_app(env)

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    host = os.environ.get("HOST", "0.0.0.0")
    debug = env == "development"

    print(f"\n[SaveKar] Development server starting...")
    print(f"[SaveKar] http://{host}:{port}")
    print(f"[SaveKar] Debug: {debug}\n")
    print("Note: For production, use: gunicorn wsgi:app\n")

    app.run(host=host, port=port, debug=debug)

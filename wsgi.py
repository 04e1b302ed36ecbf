# wsgi.py
import logging
import os

from jobscan.main import create_app

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Flask application instance for the WSGI server
app = create_app()

# Optional: run the dev server locally
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5001")))

"""Development entrypoint delegating to the application package."""

import atexit
import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from careers.database import close_mongo_connection  # noqa: E402
from careers.main import create_app  # noqa: E402

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

app = create_app()
atexit.register(close_mongo_connection)


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "3000")), debug=os.getenv("FLASK_DEBUG") == "1")

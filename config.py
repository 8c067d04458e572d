import os
from dotenv import load_dotenv

# ------------------------------------------------------------
# Configuration
# ------------------------------------------------------------

load_dotenv()

# MongoDB
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "inventory")

# JWT config
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
SESSION_EXPIRATION_MINUTES = int(os.getenv("SESSION_EXPIRATION_MINUTES", "60")) # tokens are valid for one hour

# Server / client
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "8080"))
INVENTORY_API_URL = os.getenv("INVENTORY_API_URL", f"http://localhost:{PORT}")

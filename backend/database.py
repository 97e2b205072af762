from motor.motor_asyncio import AsyncIOMotorClient

from config.env import (
    MONGO_URI,
    MONGO_SERVER_SELECTION_TIMEOUT_MS,
    MONGO_CONNECT_TIMEOUT_MS,
    MONGO_SOCKET_TIMEOUT_MS,
)

if not MONGO_URI:
    raise RuntimeError("MONGODB_URI not set")

# bounded timeouts: store calls surface an error instead of hanging
client = AsyncIOMotorClient(
    MONGO_URI,
    serverSelectionTimeoutMS=MONGO_SERVER_SELECTION_TIMEOUT_MS,
    connectTimeoutMS=MONGO_CONNECT_TIMEOUT_MS,
    socketTimeoutMS=MONGO_SOCKET_TIMEOUT_MS,
)
db = client.get_default_database()

def get_db():
    return db

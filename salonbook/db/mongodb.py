from functools import wraps
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError
from salonbook.core.config import settings
from salonbook.core.errors import StoreUnavailableError
import logging

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None
    db = None

db = Database()

async def connect_to_mongo():
    """Connect to MongoDB."""
    try:
        logger.info("Connecting to MongoDB...")
        db.client = AsyncIOMotorClient(
            settings.MONGO_URI,
            serverSelectionTimeoutMS=int(settings.STORE_TIMEOUT_SECONDS * 1000),
        )
        db.db = db.client[settings.DB_NAME]
        logger.info("Connected to MongoDB.")
        
        # Create indexes for collections
        await create_indexes()
        
    except Exception as e:
        logger.error(f"Could not connect to MongoDB: {e}")
        raise e

async def close_mongo_connection():
    """Close MongoDB connection."""
    if db.client:
        logger.info("Closing MongoDB connection...")
        db.client.close()
        logger.info("MongoDB connection closed.")

async def get_database():
    """Get MongoDB database instance."""
    return db.db

def get_collection(name: str):
    """Get a collection, failing as a store error when not connected."""
    if db.db is None:
        raise StoreUnavailableError(f"access to {name}", RuntimeError("MongoDB is not connected"))
    return db.db[name]

async def create_indexes():
    """Create indexes for collections."""
    try:
        # Salons collection indexes
        await db.db.salons.create_index("userId")
        await db.db.salons.create_index("city")
        
        # Services, groups, stylists and images are always listed per salon
        await db.db.services.create_index("salonId")
        await db.db.services.create_index([("salonId", ASCENDING), ("groupId", ASCENDING)])
        await db.db.service_groups.create_index("salonId")
        await db.db.stylists.create_index("salonId")
        await db.db.salon_images.create_index([("salonId", ASCENDING), ("isPrimary", DESCENDING)])
        
        # One weekly rule per stylist and weekday
        await db.db.availability.create_index(
            [("stylistId", ASCENDING), ("dayOfWeek", ASCENDING)],
            unique=True
        )
        
        # Appointments collection indexes
        await db.db.appointments.create_index([("stylistId", ASCENDING), ("appointmentDate", ASCENDING)])
        await db.db.appointments.create_index([("userId", ASCENDING), ("appointmentDate", DESCENDING)])
        await db.db.appointments.create_index([("salonId", ASCENDING), ("appointmentDate", ASCENDING)])
        # At most one slot-blocking appointment per stylist, date and start time
        await db.db.appointments.create_index(
            [("stylistId", ASCENDING), ("appointmentDate", ASCENDING), ("startTime", ASCENDING)],
            unique=True,
            partialFilterExpression={"blocksSlot": True},
            name="unique_active_start"
        )
        
        # Reviews collection indexes
        await db.db.reviews.create_index(
            [("salonId", ASCENDING), ("userId", ASCENDING)],
            unique=True
        )
        await db.db.reviews.create_index([("salonId", ASCENDING), ("createdAt", DESCENDING)])
        
        logger.info("MongoDB indexes created successfully.")
    except Exception as e:
        logger.error(f"Failed to create MongoDB indexes: {e}")

def store_operation(name: str):
    """Translate driver failures of a store call into StoreUnavailableError.

    DuplicateKeyError passes through untouched so callers can map unique
    index violations to domain conflicts.
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except DuplicateKeyError:
                raise
            except PyMongoError as e:
                logger.error(f"MongoDB error in {name}: {e}", exc_info=True)
                raise StoreUnavailableError(name, e) from e
        return wrapper
    return decorator

def serialize_id(document):
    """Expose the ObjectId as a string `id` field."""
    if document is not None and "_id" in document:
        document["id"] = str(document["_id"])
    return document

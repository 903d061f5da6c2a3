# database.py
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING
from config import MONGODB_URI, MONGODB_DATABASE

EMPLOYEES = "employees"
ATTENDANCE = "attendance"
LEAVES = "leaves"

client = AsyncIOMotorClient(MONGODB_URI)
db = client[MONGODB_DATABASE]

def get_employee_collection():
    return db[EMPLOYEES]

def get_attendance_collection():
    return db[ATTENDANCE]

def get_leave_collection():
    return db[LEAVES]

async def ping_database():
    """Check that the MongoDB server is reachable."""
    await client.admin.command("ping")
    return True

async def ensure_indexes():
    """One attendance document per employee and month."""
    await get_attendance_collection().create_index(
        [("employee_id", ASCENDING), ("month", ASCENDING), ("year", ASCENDING)],
        unique=True,
    )

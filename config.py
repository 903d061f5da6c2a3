# config.py
from dotenv import load_dotenv
import os

load_dotenv()

APP_NAME = "Employee Management System"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Employee, attendance and leave management backend"

MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DATABASE = os.getenv("MONGODB_DATABASE", "employee_management")

REPORT_OUTPUT_DIR = os.getenv("REPORT_OUTPUT_DIR", os.path.join(os.getcwd(), "exports"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Annual leave allowance per employee
MAX_LEAVE_PER_YEAR = 42
RETIREMENT_AGE = 60

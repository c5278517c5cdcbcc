# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Point the service at a throwaway in-memory database before it is imported."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

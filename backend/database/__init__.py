from database.database import Database
from database.models import Base

__all__ = ["Database", "Base"]

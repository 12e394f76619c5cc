from .storage import SQLAlchemyTableStorage, TableStorage
from .relationships import GTFSRelationships

__all__ = ["SQLAlchemyTableStorage", "TableStorage", "GTFSRelationships"]

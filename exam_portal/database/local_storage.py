# exam_portal/database/local_storage.py
from typing import Optional
import logging
from sqlalchemy.orm import Session
from ..models.storage_models import DBStorageItem

logger = logging.getLogger(__name__)

class LocalStorage:
    """String key/value storage backed by the storage_items table.

    Mirrors the browser localStorage contract: values are opaque strings,
    a missing key reads as None, and every write is committed immediately.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_item(self, key: str) -> Optional[str]:
        item = self.db.get(DBStorageItem, key)
        return item.value if item else None

    def set_item(self, key: str, value: str) -> None:
        try:
            item = self.db.get(DBStorageItem, key)
            if item:
                item.value = value
            else:
                self.db.add(DBStorageItem(key=key, value=value))
            self.db.commit()
        except Exception as e:
            logger.error(f"Error writing storage key {key}: {str(e)}")
            self.db.rollback()
            raise

    def remove_item(self, key: str) -> None:
        try:
            self.db.query(DBStorageItem).filter(DBStorageItem.key == key).delete()
            self.db.commit()
        except Exception as e:
            logger.error(f"Error removing storage key {key}: {str(e)}")
            self.db.rollback()
            raise

# exam_portal/models/storage_models.py
from sqlalchemy import Column, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class DBStorageItem(Base):
    __tablename__ = "storage_items"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)  # JSON-encoded blob

    def __repr__(self):
        return f"<DBStorageItem {self.key}>"

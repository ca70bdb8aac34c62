from datetime import datetime
from sqlalchemy import Column, DateTime, String

class BaseEntity:
    created_by = Column(String(255), nullable=False, default='system')
    created_on = Column(DateTime, nullable=False, default=datetime.now)
    modified_by = Column(String(255), nullable=False, default='system')
    modified_on = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

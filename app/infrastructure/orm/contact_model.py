from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from ...db.models import Base


class ContactMessageModel(Base):
    """Messages submitted through the public contact form"""
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<ContactMessage(id={self.id}, email='{self.email}')>"

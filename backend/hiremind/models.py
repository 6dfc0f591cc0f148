from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.dialects.sqlite import JSON as SQLiteJSON

from .db import Base


class ResumeSession(Base):
    __tablename__ = "resume_sessions"
    session_id = Column(String, primary_key=True)
    data = Column(SQLiteJSON)            # UserProfile fields
    filename = Column(String)
    raw_text = Column(Text)
    uploaded_at = Column(DateTime)               # naive UTC
    expires_at = Column(DateTime, index=True)   # naive UTC

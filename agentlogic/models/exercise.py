from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, func
from agentlogic.core.db import Base


class Exercise(Base):
    __tablename__ = "exercises"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    language = Column(String, nullable=False, index=True)  # 'javascript' | 'python'
    difficulty = Column(String, nullable=False, index=True)  # 'easy' | 'medium' | 'hard'
    function_name = Column(String, nullable=True)
    test_cases = Column(JSON, nullable=False, default=list)  # [{input, expectedOutput, description?}]
    created_at = Column(DateTime(timezone=True), server_default=func.now())

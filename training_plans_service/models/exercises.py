from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String

from .templates import Base


class ExerciseVariant(Base):
    __tablename__ = "exercise_variants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    contraindication_tags = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ExerciseVariant(id={self.id}, name='{self.name}')>"


class ExerciseLibraryItem(Base):
    __tablename__ = "exercise_library"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ExerciseLibraryItem(id={self.id}, name='{self.name}')>"

from sqlalchemy import Column, Integer, String, Text

from medistore.data.database import Base


class CategoryModel(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    slug = Column(String(120), nullable=True, unique=True)
    description = Column(Text, nullable=True)

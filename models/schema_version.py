from sqlalchemy import Column, Integer
from database import Base


class SchemaVersion(Base):
    __tablename__ = 'schema_version'

    # Single row; the migration routine replaces it after a successful run
    version = Column(Integer, primary_key=True, autoincrement=False)

    def __repr__(self):
        return f'<SchemaVersion v{self.version}>'

from sqlalchemy.orm import declarative_base

# Shared declarative base for every SQLAlchemy model
Base = declarative_base()

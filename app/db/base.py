from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Note: Models are registered by importing app.db.models (see init_db())
# All models must import Base from this module

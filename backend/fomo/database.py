from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from .config import settings

# Hosted Postgres drops idle connections, so connections are checked on checkout
engine = create_engine(
    settings.resolved_database_url,
    pool_pre_ping=True,
)

# SessionLocal: the main way to talk to the database
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

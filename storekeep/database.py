import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from storekeep.core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError("[ERROR] DATABASE_URL not found!")

IS_SQLITE = DATABASE_URL.lower().startswith("sqlite")

engine = create_engine(
    DATABASE_URL,
    connect_args={
        "check_same_thread": False  # SQLite multi-thread
    } if IS_SQLITE else {
        "connect_timeout": 10,
    },
    echo=False,
    pool_pre_ping=True,
    **({} if IS_SQLITE else {
        "pool_size": 3,
        "max_overflow": 10,
        "pool_recycle": 3600,
        "pool_timeout": 30,
    }),
)

# Create SessionLocal class
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def test_connection():
    """Test database connection - NON-BLOCKING."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
            safe_url = DATABASE_URL.split('@')[1] if '@' in DATABASE_URL else DATABASE_URL.split('/')[-1]
            logger.info(f"[OK] Database connected: {safe_url}")
            return True
    except Exception as e:
        logger.warning(f"[WARN] Database connection failed (continuing): {str(e)}")
        return False


def init_db():
    """Initialize database tables - NON-BLOCKING."""
    try:
        # Import all models so they're registered with Base
        import storekeep.models  # noqa: F401
        from storekeep.db.base import Base

        Base.metadata.create_all(bind=engine)
        logger.info("[OK] Database tables initialized!")
        return True
    except Exception as e:
        logger.warning(f"[WARN] Database init warning: {str(e)}")
        return False


def close_db_connection():
    """Close database connections."""
    try:
        engine.dispose()
        logger.info("[OK] Database connections closed")
    except Exception as e:
        logger.warning(f"[WARN] Error closing DB: {str(e)}")

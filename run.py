import uvicorn
import os


def run_migrations():
    """Run Alembic migrations."""
    try:
        from alembic.config import Config
        from alembic import command

        alembic_cfg = Config("alembic.ini")
        print("[STARTUP] Running database migrations...")
        command.upgrade(alembic_cfg, "head")
        print("[STARTUP] Migrations complete!")
        return True
    except Exception as e:
        print(f"[WARN] Migration failed: {e}")
        return False


if __name__ == "__main__":
    # Tables are otherwise created on app startup
    if os.getenv("RUN_MIGRATIONS") == "true":
        if not run_migrations():
            print("[WARN] Falling back to direct table creation on startup...")

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", 8000))

    # Disable reload in production
    reload = os.getenv("ENV") == "development"

    print(f"[STARTUP] Server binding to host={host} port={port}")
    uvicorn.run(
        "storekeep.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
        workers=1,  # Expiry loop must run in a single process
        lifespan="on",
    )

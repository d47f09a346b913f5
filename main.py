"""
Session admin API entrypoint:
    uvicorn main:app --reload

Schema first:  alembic upgrade head
"""

from lms_sessions.main import app  # noqa: F401

if __name__ == "__main__":
    import uvicorn

    from lms_sessions.core.config import settings

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)

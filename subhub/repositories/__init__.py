"""
Data access for SubHub SL.

Every repository takes an `async_sessionmaker`; the FastAPI dependency
`subhub.db.session.get_session_factory` supplies the process-wide one and
tests substitute an in-memory SQLite factory.
"""

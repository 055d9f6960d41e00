def session_dependency(SessionLocal):
    """
    Build the FastAPI dependency handing out one database session per request.
    """

    def get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    return get_db

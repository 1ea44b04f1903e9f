from mida_app.db.session import get_db

__all__ = ["get_db"]

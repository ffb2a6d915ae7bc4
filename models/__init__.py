"""
Persistence package. `storage` is the process-wide DBStorage; its scoped_session
hands each thread (and so each request) its own session.
"""
from models.db_storage import DBStorage

storage = DBStorage()
storage.reload()

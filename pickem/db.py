from flask import current_app, g

STORAGE_KEY = "pickem.storage"


def get_storage():
    return current_app.extensions[STORAGE_KEY]


def get_session():
    """Session for the current request; handed back in the app's teardown."""
    if "db_session" not in g:
        g.db_session = get_storage().get_session()
    return g.db_session

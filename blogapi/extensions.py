"""
Flask extensions, created unbound and initialized in create_app() with init_app().
"""
import sqlite3

from flask_bcrypt import Bcrypt
from flask_jwt_extended import JWTManager
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()
bcrypt = Bcrypt()
jwt = JWTManager()


@event.listens_for(Engine, 'connect')
def _configure_sqlite(dbapi_connection, connection_record):
    # SQLite ships with foreign keys off and a case-insensitive LIKE
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.execute('PRAGMA case_sensitive_like=ON')
    cursor.close()

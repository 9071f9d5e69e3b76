from flask import Flask
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine
import os
import sqlite3

def build_database_uri():
    database_url = os.getenv('DATABASE_URL')
    if database_url:
        return database_url

    db_user = os.getenv('DB_USER')
    db_pass = os.getenv('DB_PASS')
    db_name = os.getenv('DB_NAME')
    instance = os.getenv('INSTANCE_CONNECTION_NAME')
    if all([db_user, db_pass, db_name, instance]):
        return (
            f"postgresql+psycopg2://{db_user}:{db_pass}@/{db_name}"
            f"?host=/cloudsql/{instance}"
        )

    return 'sqlite:///scoring.db'


app = Flask(__name__)
app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'your-secret-key-change-this')
app.config['SQLALCHEMY_DATABASE_URI'] = build_database_uri()
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['COMPETITION_TITLE'] = os.getenv('COMPETITION_TITLE', 'Live Scoring')

socketio = SocketIO(app, async_mode='threading')

DEFAULT_MAX_SCORE = 10

db = SQLAlchemy(app)

# SQLite ships with foreign keys off; cascades and item references depend on them
@event.listens_for(Engine, 'connect')
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

import os
from flask_sqlalchemy import SQLAlchemy
from dotenv import load_dotenv

from config.logging import get_logger

# Load environment variables from .env file
load_dotenv()

db = SQLAlchemy()
log = get_logger()


def initialize_db(app):
    """
    Initialize SQLAlchemy with app config.

    The connection pool is sized for a server database (MySQL/PostgreSQL).
    SQLite URLs (local runs and tests) keep SQLAlchemy's default pool.
    """
    app.config.setdefault('SQLALCHEMY_DATABASE_URI', os.getenv('DATABASE_URL', 'sqlite:///siteops.db'))
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    environment = os.getenv("ENVIRONMENT", "development")
    database_url = app.config['SQLALCHEMY_DATABASE_URI'] or ''

    if not database_url.startswith('sqlite'):
        pool_config = {
            "pool_size": 20,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
            "echo_pool": environment == "development",
        }

        # Connection-limited hosted databases
        if os.getenv('USE_SMALL_POOL') == 'true':
            pool_config["pool_size"] = 5
            pool_config["max_overflow"] = 5

        app.config.setdefault('SQLALCHEMY_ENGINE_OPTIONS', pool_config)
        log.info(f"Database pool configured: {pool_config['pool_size']} connections + {pool_config['max_overflow']} overflow")

    db.init_app(app)

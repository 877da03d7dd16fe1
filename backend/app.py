from flask import Flask
from flask_cors import CORS
from flask_compress import Compress
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from dotenv import load_dotenv
from config.routes import initialize_routes
from config.db import initialize_db as initialize_sqlalchemy, db
from config.logging import get_logger, configure_quiet_logging
import models  # noqa: F401  registers every table on db.metadata
import os

# Load environment variables from .env file
# Get the directory where this file is located (backend directory)
basedir = os.path.abspath(os.path.dirname(__file__))
# Load .env from the backend directory
load_dotenv(os.path.join(basedir, '.env'))

ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-Request-ID"]
ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"]


def create_app(test_config=None):
    app = Flask(__name__)
    app.config['SECRET_KEY'] = os.getenv("SECRET_KEY", "default-secret-key")
    app.config['RATELIMIT_ENABLED'] = True

    if test_config:
        app.config.update(test_config)

    # Get environment (default to development)
    environment = os.getenv("ENVIRONMENT", "development")

    configure_quiet_logging()
    logger = get_logger()

    if environment == "production":
        allowed_origins = [
            origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()
        ]
        app.config['SESSION_COOKIE_SECURE'] = True
        app.config['SESSION_COOKIE_HTTPONLY'] = True
        app.config['SESSION_COOKIE_SAMESITE'] = 'Strict'
    else:
        # Never use origins="*" together with supports_credentials
        allowed_origins = [
            "http://localhost:3000", "http://localhost:5173",
            "http://127.0.0.1:3000", "http://127.0.0.1:5173"
        ]

    CORS(app,
         origins=allowed_origins,
         allow_headers=ALLOWED_HEADERS,
         methods=ALLOWED_METHODS,
         supports_credentials=True,
         max_age=3600)

    # Response compression
    app.config['COMPRESS_MIMETYPES'] = ['application/json', 'text/plain']
    app.config['COMPRESS_LEVEL'] = 6
    app.config['COMPRESS_MIN_SIZE'] = 500
    Compress(app)

    # Rate limiting, shared through Redis when available
    redis_url = os.getenv('REDIS_URL', None)
    limiter = Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=["1000 per day", "200 per hour"] if environment == "production" else ["10000 per hour"],
        storage_uri=redis_url if redis_url else "memory://",
        strategy="fixed-window"
    )
    app.limiter = limiter

    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"

        # HSTS only behind HTTPS
        if environment == "production":
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response

    initialize_sqlalchemy(app)  # Init SQLAlchemy ORM
    initialize_routes(app)  # Register routes

    @app.cli.command("init-db")
    def init_db_command():
        """Create all database tables"""
        with app.app_context():
            db.create_all()
        logger.info("Database tables created")

    logger.info(f"SiteOps backend initialised ({environment})")
    return app


if __name__ == "__main__":
    app = create_app()
    environment = os.getenv("ENVIRONMENT", "development")
    port = int(os.getenv("PORT", 5000))
    debug = environment != "production"

    print(">> Starting SiteOps Server")
    print(f"   Environment: {environment}")
    print(f"   Port: {port}")
    print(f"   Debug: {debug}")
    print("=" * 60)

    app.run(host="0.0.0.0", port=port, debug=debug)

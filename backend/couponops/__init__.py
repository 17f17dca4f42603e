from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import logging

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    from .config.settings import load_settings
    app.config.update(load_settings())
    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')), logging.INFO))

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)

    # Core collaborators: built once per process, shared read-only by every request
    from .services.policy import build_default_registry
    from .services.audit import AuditRecorder
    app.extensions['permission_registry'] = build_default_registry(app.config.get('ROLE_CAPABILITIES'))
    app.extensions['audit_recorder'] = AuditRecorder(sessionmaker(bind=db_engine, expire_on_commit=False))

    from .routes.auth import auth_bp
    from .routes.admins import admins_bp
    from .routes.merchants import merchants_bp
    from .routes.coupons import coupons_bp
    from .routes.deals import deals_bp
    from .routes.banners import banners_bp
    from .routes.conversions import conversions_bp
    from .routes.audit_logs import audit_bp
    from .routes.extension import extension_bp
    from .routes.tracking import tracking_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(admins_bp)
    app.register_blueprint(merchants_bp)
    app.register_blueprint(coupons_bp)
    app.register_blueprint(deals_bp)
    app.register_blueprint(banners_bp)
    app.register_blueprint(conversions_bp)
    app.register_blueprint(audit_bp, url_prefix='/audit')
    app.register_blueprint(extension_bp, url_prefix='/extension')
    app.register_blueprint(tracking_bp)

    @app.teardown_appcontext
    def remove_session(exc=None):
        # fresh identity map per request: actor lookups must see current is_active / role
        SessionLocal.remove()

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'detail': e.description,
                }
            }
            capability = getattr(e, 'capability', None)
            if capability:
                payload['error']['capability'] = capability
            return payload, e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'Unexpected error'
            }
        }, 500

    return app


def get_db():
    return SessionLocal()

import os
from flask import Flask, jsonify
from flask_login import current_user
from config import ProductionConfig, DevelopmentConfig, TestingConfig

# Import extensions to avoid circular imports
from extensions import db, login_manager, csrf
from flask_migrate import Migrate

# Import models here to avoid circular imports
from models import User
from error_handler import register_error_handlers


def create_app(config_class=None):
    """
    Factory function to create the Flask application.
    Automatically selects configuration based on environment.
    """
    if config_class is None:
        # Auto-detect environment and select appropriate config
        env = os.environ.get('FLASK_ENV', 'production').lower()
        if env == 'development':
            config_class = DevelopmentConfig
        elif env == 'testing':
            config_class = TestingConfig
        else:
            config_class = ProductionConfig  # Default to production for security

    app = Flask(__name__)
    app.config.from_object(config_class)

    # The default SQLite database lives in the instance folder
    os.makedirs(app.instance_path, exist_ok=True)

    # Initialize extensions with the app
    db.init_app(app)
    Migrate(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)

    # Initialize database schema
    with app.app_context():
        try:
            db.create_all()
            app.logger.info("Database tables created successfully")
        except Exception as e:
            app.logger.error(f"FATAL DATABASE ERROR DURING INITIALIZATION: {e}")
            raise

    # User loader function for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # Import and register blueprints
    from authroutes import auth_blueprint
    from family_routes import family_blueprint

    app.register_blueprint(auth_blueprint)
    app.register_blueprint(family_blueprint, url_prefix='/api')

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        return response

    register_error_handlers(app)

    @app.route('/')
    def home():
        return jsonify({
            'success': True,
            'app': 'homeschool-hub',
            'authenticated': current_user.is_authenticated,
        })

    return app

#!/usr/bin/env python3
"""
WSGI entry point for the Homeschool Hub API.
Gunicorn serves `application`; running this file starts the development server.
"""

from app import create_app

app = create_app()
application = app

if __name__ == "__main__":
    # The debug setting is controlled from config.py
    app.run(debug=app.config.get('DEBUG', False))

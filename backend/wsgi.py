# backend/wsgi.py
# Entry point for `flask --app wsgi` and WSGI servers (e.g. gunicorn wsgi:app).
from storefront import create_app

app = create_app()

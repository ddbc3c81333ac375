# backend/wsgi.py
from tasklister import create_app

app = create_app()

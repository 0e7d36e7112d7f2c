# backend/gunicorn_conf.py

# Gunicorn config file

import os

# Basic configuration
bind = f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '8000')}"
# Operator sessions live in process memory; more than one worker would split them.
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"
wsgi_app = "callscript.main:app"

# Settings for running behind a reverse proxy like Nginx
forwarded_allow_ips = "*"

# --- Logging ---
# Send access and error logs to stdout and stderr
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

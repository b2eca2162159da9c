"""WSGI entrypoint for hosting platforms that look for `wsgi.py`.

Exports a module-level `app` (Flask instance) so platforms like Vercel/UWSGI/Gunicorn
can import it directly: `from wsgi import app`.

Importing this module fails immediately when MONGODB_URI is not set.
"""
from core_registration import create_app

# create and expose the Flask application instance expected by hosts
app = create_app()


if __name__ == "__main__":
    # Run without the debugger by default.
    # To enable debugging explicitly set the FLASK_DEBUG env var when needed.
    app.run()

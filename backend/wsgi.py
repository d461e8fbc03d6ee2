"""WSGI entry point: `gunicorn wsgi:app` or `python backend/wsgi.py` for the dev server."""
from rbac_admin import create_app

app = create_app()

if __name__ == '__main__':
    app.logger.info('Server running on port %s', app.config['PORT'])
    app.run(host='0.0.0.0', port=app.config['PORT'])

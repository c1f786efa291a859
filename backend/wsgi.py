# backend/wsgi.py
# FLASK_APP entrypoint: `python -m flask --app wsgi run`
from caja import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5001)

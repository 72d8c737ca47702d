"""Development entrypoint for running the Flask API locally.

Usage:
- FLASK_APP=gitconsistent.main:app flask run --reload
- python -m gitconsistent.main
"""

from __future__ import annotations

from gitconsistent import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5000, debug=True)

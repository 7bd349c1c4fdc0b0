from flask import Blueprint

from pickem import __version__

bp = Blueprint("health", __name__)


@bp.get("/")
def home():
    """
    Root greeting
    ---
    tags:
      - Health
    responses:
      200:
        description: Hello world
    """
    return {"hello": "world"}, 200


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            version:
              type: string
              example: 1.0.0
    """
    return {"status": "ok", "version": __version__}, 200

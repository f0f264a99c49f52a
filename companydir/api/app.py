from typing import Any

from flask import Flask, jsonify, request
from werkzeug.exceptions import BadRequest, MethodNotAllowed, NotFound

from companydir.storage import CompanyStore
from .handlers import CompanyHandlers, Response

NOT_FOUND = "404 page not found"
PLAIN_TEXT = {"Content-Type": "text/plain; charset=utf-8"}


def create_app(store: CompanyStore) -> Flask:
    """
    Build the HTTP application around an open store.

    Routes:
    - GET  /list   -> list all companies
    - POST /add    -> insert or update a company
    - POST /delete -> delete a company by inn or name

    A wrong method on /add or /delete is a 400; any other unknown route,
    POST /list included, is a 404.
    """
    app = Flask(__name__)
    app.json.sort_keys = False
    handlers = CompanyHandlers(store)

    @app.get("/list")
    def list_companies():
        return reply(handlers.list_companies())

    @app.post("/add")
    def add_company():
        return reply(handlers.add_company(request_json()))

    @app.post("/delete")
    def delete_company():
        return reply(handlers.delete_company(request_json()))

    @app.errorhandler(BadRequest)
    def bad_request(error):
        return jsonify(error=error.description), 400

    @app.errorhandler(MethodNotAllowed)
    def wrong_method(error):
        if request.path == "/list":
            return NOT_FOUND, 404, PLAIN_TEXT
        return "Wrong method", 400, PLAIN_TEXT

    @app.errorhandler(NotFound)
    def not_found(error):
        return NOT_FOUND, 404, PLAIN_TEXT

    return app


def request_json() -> Any:
    """Decode the request body as JSON whatever its content type."""
    try:
        return request.get_json(force=True)
    except BadRequest as e:
        raise BadRequest("malformed JSON body") from e


def reply(response: Response):
    if response.payload is None:
        return "", response.status
    return jsonify(response.payload), response.status

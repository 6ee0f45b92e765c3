from __future__ import annotations

from flask import Flask

from ..common.http import api_endpoint, json_body
from ..container import Container
from ..core.constants import API_PREFIX


def register(app: Flask, container: Container) -> None:
    service = container.term_service

    @app.route(f"{API_PREFIX}/terms", methods=["GET"], endpoint="terms_list")
    @api_endpoint
    def terms_list():
        return service.get_all_terms()

    @app.route(f"{API_PREFIX}/terms/active", methods=["GET"], endpoint="terms_active")
    @api_endpoint
    def terms_active():
        return service.get_active_term()

    @app.route(f"{API_PREFIX}/terms", methods=["POST"], endpoint="terms_create")
    @api_endpoint
    def terms_create():
        body = json_body()
        return service.create_term(
            term_code=body.get("term_code"),
            term_name=body.get("term_name"),
            start_date=body.get("start_date"),
            end_date=body.get("end_date"),
            is_active=bool(body.get("is_active", False)),
        )

    @app.route(f"{API_PREFIX}/terms/<int:term_id>", methods=["PUT"], endpoint="terms_update")
    @api_endpoint
    def terms_update(term_id: int):
        return service.update_term(term_id, json_body())

    @app.route(f"{API_PREFIX}/terms/<int:term_id>", methods=["DELETE"], endpoint="terms_delete")
    @api_endpoint
    def terms_delete(term_id: int):
        service.delete_term(term_id)

    @app.route(f"{API_PREFIX}/terms/<int:term_id>/activate", methods=["PUT"], endpoint="terms_activate")
    @api_endpoint
    def terms_activate(term_id: int):
        service.set_active_term(term_id)

from __future__ import annotations

from flask import Flask, request

from ..common.http import api_endpoint, json_body
from ..container import Container
from ..core.constants import API_PREFIX


def register(app: Flask, container: Container) -> None:
    service = container.course_period_service

    # ---- periods ----

    @app.route(f"{API_PREFIX}/periods", methods=["GET"], endpoint="periods_list")
    @api_endpoint
    def periods_list():
        return service.get_periods_by_term(request.args.get("term_id"))

    @app.route(f"{API_PREFIX}/periods-with-rules", methods=["GET"], endpoint="periods_with_rules")
    @api_endpoint
    def periods_with_rules():
        return service.get_periods_with_rules(request.args.get("term_id"))

    @app.route(f"{API_PREFIX}/periods", methods=["POST"], endpoint="periods_create")
    @api_endpoint
    def periods_create():
        return service.create_period(json_body())

    @app.route(f"{API_PREFIX}/periods/<int:period_id>", methods=["PUT"], endpoint="periods_update")
    @api_endpoint
    def periods_update(period_id: int):
        return service.update_period(period_id, json_body())

    @app.route(f"{API_PREFIX}/periods/<int:period_id>", methods=["DELETE"], endpoint="periods_delete")
    @api_endpoint
    def periods_delete(period_id: int):
        service.delete_period(period_id)

    @app.route(f"{API_PREFIX}/periods/batch", methods=["POST"], endpoint="periods_batch_create")
    @api_endpoint
    def periods_batch_create():
        return {"created": service.batch_create_periods(json_body().get("periods") or [])}

    @app.route(f"{API_PREFIX}/periods/copy", methods=["POST"], endpoint="periods_copy")
    @api_endpoint
    def periods_copy():
        body = json_body()
        return {"copied": service.copy_periods_to_term(body.get("source_term_id"), body.get("target_term_id"))}

    # ---- rules ----

    @app.route(f"{API_PREFIX}/rules", methods=["GET"], endpoint="rules_list")
    @api_endpoint
    def rules_list():
        return service.get_rules_by_period(request.args.get("period_id"))

    @app.route(f"{API_PREFIX}/rules", methods=["POST"], endpoint="rules_create")
    @api_endpoint
    def rules_create():
        body = json_body()
        return service.create_rule(body.get("rule") or {}, body.get("conditions") or [])

    @app.route(f"{API_PREFIX}/rules/<int:rule_id>", methods=["PUT"], endpoint="rules_update")
    @api_endpoint
    def rules_update(rule_id: int):
        body = json_body()
        return service.update_rule(rule_id, body.get("rule") or {}, body.get("conditions"))

    @app.route(f"{API_PREFIX}/rules/<int:rule_id>", methods=["DELETE"], endpoint="rules_delete")
    @api_endpoint
    def rules_delete(rule_id: int):
        service.delete_rule(rule_id)

    # ---- matching ----

    @app.route(f"{API_PREFIX}/match", methods=["POST"], endpoint="periods_match")
    @api_endpoint
    def periods_match():
        body = json_body()
        return service.get_course_period_time(
            body.get("term_id"),
            body.get("period_no"),
            body.get("course_context") or {},
        )

    @app.route(f"{API_PREFIX}/match/batch", methods=["POST"], endpoint="periods_match_batch")
    @api_endpoint
    def periods_match_batch():
        body = json_body()
        return service.batch_get_course_period_times(body.get("term_id"), body.get("requests") or [])

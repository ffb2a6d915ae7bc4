"""
Client administration (ADMIN only):
- GET    /admin/clients
- GET    /admin/clients/<client_id>
- PUT    /admin/clients/<client_id>
- POST   /admin/clients/<client_id>/deactivate
- DELETE /admin/clients/<client_id>

Password changes, deactivation and deletion end the client's sessions.
"""
from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, abort

from models.client import Role
from models.schemas.client import ClientOutSchema, ClientUpdateSchema
from utils.decorators import roles_required
from utils.login import get_login_service

MAX_LIMIT = 100

bp = Blueprint("clients", __name__)

client_update_schema = ClientUpdateSchema()
client_out_schema = ClientOutSchema()
client_list_out_schema = ClientOutSchema(many=True)


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def _get_client_or_404(client_id: str):
    client = get_login_service().credentials.get(client_id)
    if not client:
        abort(404)
    return client


@bp.get("")
@roles_required(Role.ADMIN)
def list_clients(security_context):
    """
    List all clients
    ---
    tags:
      - Clients
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
      403: { description: Forbidden }
    """
    page, limit = parse_pagination()
    rows, total = get_login_service().credentials.list(page, limit)
    return jsonify(
        {
            "data": client_list_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total}
        }
    )


@bp.get("/<client_id>")
@roles_required(Role.ADMIN)
def get_client(client_id: str, security_context):
    """
    Get a client by id
    ---
    tags:
      - Clients
    security:
      - Bearer: []
    parameters:
      - in: path
        name: client_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    client = _get_client_or_404(client_id)
    return jsonify({"data": client_out_schema.dump(client)}), 200


@bp.put("/<client_id>")
@roles_required(Role.ADMIN)
def update_client(client_id: str, security_context):
    """
    Update a client's name and/or password. A new password revokes the client's refresh tokens.
    ---
    tags:
      - Clients
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: client_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            password: { type: string }
    responses:
      200: { description: OK }
      404: { description: Not found }
      422: { description: Validation error }
    """
    client = _get_client_or_404(client_id)
    data = client_update_schema.load(request.get_json(silent=True) or {})
    get_login_service().update_profile(client, name=data.get("name"), password=data.get("password"))
    return jsonify({"data": client_out_schema.dump(client)}), 200


@bp.post("/<client_id>/deactivate")
@roles_required(Role.ADMIN)
def deactivate_client(client_id: str, security_context):
    """
    Deactivate (soft delete) a client and revoke its refresh tokens
    ---
    tags:
      - Clients
    security:
      - Bearer: []
    parameters:
      - in: path
        name: client_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    client = _get_client_or_404(client_id)
    get_login_service().deactivate(client)
    return jsonify({"data": client_out_schema.dump(client)}), 200


@bp.delete("/<client_id>")
@roles_required(Role.ADMIN)
def delete_client(client_id: str, security_context):
    """
    Delete a client and its refresh tokens
    ---
    tags:
      - Clients
    security:
      - Bearer: []
    parameters:
      - in: path
        name: client_id
        type: string
        required: true
    responses:
      204: { description: Deleted }
      404: { description: Not found }
    """
    client = _get_client_or_404(client_id)
    if client.id == security_context.principal.id:
        abort(409, description="Administrators cannot delete their own account")
    get_login_service().delete(client)
    return ("", 204)

from __future__ import annotations

from typing import List, Tuple

from flask import Blueprint, request, jsonify, abort
from sqlalchemy import func

from models import storage
from models.client import Role
from models.vehicle import Vehicle
from models.schemas.vehicle import VehicleCreateSchema, VehicleUpdateSchema, VehicleOutSchema
from utils.decorators import login_required, roles_required

bp = Blueprint("vehicles", __name__)

# Schemas
vehicle_create_schema = VehicleCreateSchema()
vehicle_update_schema = VehicleUpdateSchema()
vehicle_out_schema = VehicleOutSchema()
vehicles_out_schema = VehicleOutSchema(many=True)

# Sorting allowlist: API field -> SQLAlchemy column
SORT_COLUMNS = {
    "brand": Vehicle.brand,
    "model": Vehicle.model,
    "year": Vehicle.year,
    "price": Vehicle.price,
    "created_at": Vehicle.created_at,
}

MAX_LIMIT = 100

EDITABLE_FIELDS = ["brand", "model", "year", "color", "price", "is_available"]


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def parse_sort() -> List:
    sort_param = request.args.get("sort", "brand")
    fields = [s.strip() for s in sort_param.split(",") if s.strip()]
    order_by = []
    for f in fields:
        desc = f.startswith("-")
        key = f[1:] if desc else f
        col = SORT_COLUMNS.get(key)
        if col is None:
            abort(400, description=f"Unsupported sort field: {key}")
        order_by.append(col.desc() if desc else col.asc())
    return order_by or [Vehicle.brand.asc()]


def apply_filters(query):
    available = request.args.get("available")
    brand = request.args.get("brand")
    model = request.args.get("model")

    if available is not None:
        query = query.filter(Vehicle.is_available.is_(available.lower() in ("1", "true", "yes")))
    # Case-insensitive exact match
    if brand:
        query = query.filter(func.lower(Vehicle.brand) == brand.strip().lower())
    if model:
        query = query.filter(func.lower(Vehicle.model) == model.strip().lower())
    return query


def _plate_taken(license_plate: str, exclude_id: str | None = None) -> bool:
    query = storage.get_session().query(Vehicle.id).filter(Vehicle.license_plate == license_plate)
    if exclude_id:
        query = query.filter(Vehicle.id != exclude_id)
    return query.first() is not None


@bp.get("/vehicles")
@login_required()
def list_vehicles(security_context):
    """
    List vehicles with pagination, sorting and filters
    ---
    tags:
      - Vehicles
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
      - in: query
        name: sort
        type: string
        description: "Comma-separated fields; prefix with '-' for desc. Allowed: brand, model, year, price, created_at"
        default: "brand"
      - in: query
        name: available
        type: boolean
      - in: query
        name: brand
        type: string
      - in: query
        name: model
        type: string
    responses:
      200:
        description: List of vehicles
      401:
        description: Unauthorized
    """
    session = storage.get_session()
    page, limit = parse_pagination()
    order_by = parse_sort()

    query = apply_filters(session.query(Vehicle))
    total = query.count()
    rows = query.order_by(*order_by).offset((page - 1) * limit).limit(limit).all()

    return jsonify(
        {
            "data": vehicles_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


@bp.get("/vehicles/<vehicle_id>")
@login_required()
def get_vehicle(vehicle_id: str, security_context):
    """
    Get a single vehicle by id
    ---
    tags:
      - Vehicles
    security:
      - Bearer: []
    parameters:
      - in: path
        name: vehicle_id
        type: string
        required: true
    responses:
      200:
        description: Vehicle found
      404:
        description: Not found
    """
    v = storage.get(Vehicle, vehicle_id)
    if not v:
        abort(404)
    return jsonify({"data": vehicle_out_schema.dump(v)})


@bp.post("/vehicles")
@roles_required(Role.ADMIN)
def create_vehicle(security_context):
    """
    Create a new vehicle (admin)
    ---
    tags:
      - Vehicles
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            brand: { type: string }
            model: { type: string }
            year: { type: integer, minimum: 1 }
            color: { type: string }
            license_plate: { type: string }
            price: { type: string, example: "25000.00" }
            is_available: { type: boolean, default: true }
    responses:
      201:
        description: Created
      409:
        description: Vehicle with same license plate already exists
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = vehicle_create_schema.load(payload)

    if _plate_taken(data["license_plate"]):
        abort(409, description="A vehicle with this license plate already exists.")

    v = Vehicle(
        license_plate=data["license_plate"],
        created_by_id=security_context.principal.id,
        **{field: data.get(field) for field in EDITABLE_FIELDS},
    )
    storage.new(v)
    storage.save()
    return jsonify({"data": vehicle_out_schema.dump(v)}), 201


@bp.put("/vehicles/<vehicle_id>")
@roles_required(Role.ADMIN)
def update_vehicle(vehicle_id: str, security_context):
    """
    Update a vehicle (admin)
    ---
    tags:
      - Vehicles
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: vehicle_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200:
        description: Updated
      404:
        description: Not found
      409:
        description: Duplicate license plate
      422:
        description: Validation error
    """
    v = storage.get(Vehicle, vehicle_id)
    if not v:
        abort(404)

    data = vehicle_update_schema.load(request.get_json(silent=True) or {})

    if data["license_plate"] != v.license_plate:
        if _plate_taken(data["license_plate"], exclude_id=v.id):
            abort(409, description="A vehicle with this license plate already exists.")
        v.license_plate = data["license_plate"]

    for field in EDITABLE_FIELDS:
        if field in data:
            setattr(v, field, data[field])

    storage.new(v)
    storage.save()
    return jsonify({"data": vehicle_out_schema.dump(v)})


@bp.delete("/vehicles/<vehicle_id>")
@roles_required(Role.ADMIN)
def delete_vehicle(vehicle_id: str, security_context):
    """
    Delete a vehicle (admin)
    ---
    tags:
      - Vehicles
    security:
      - Bearer: []
    parameters:
      - in: path
        name: vehicle_id
        type: string
        required: true
    responses:
      204:
        description: Deleted
      404:
        description: Not found
    """
    v = storage.get(Vehicle, vehicle_id)
    if not v:
        abort(404)
    storage.delete(v)
    storage.save()
    return ("", 204)

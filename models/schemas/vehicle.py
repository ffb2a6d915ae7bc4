from marshmallow import Schema, fields, validate, post_load, ValidationError


def normalize_plate(raw: str) -> str:
    return "".join(raw.split()).upper()


class VehicleBaseSchema(Schema):
    brand = fields.String(required=True, validate=validate.Length(min=1, max=100))
    model = fields.String(required=True, validate=validate.Length(min=1, max=100))
    year = fields.Integer(required=True, validate=validate.Range(min=1))
    color = fields.String(allow_none=True, validate=validate.Length(max=50))
    license_plate = fields.String(required=True, validate=validate.Length(min=1, max=20))
    price = fields.Decimal(as_string=True, allow_none=True, validate=validate.Range(min=0, min_inclusive=False))
    is_available = fields.Boolean(load_default=True)

    @post_load
    def _normalize_plate(self, data, **kwargs):
        if data.get("license_plate"):
            data["license_plate"] = normalize_plate(data["license_plate"])
            if not data["license_plate"]:
                raise ValidationError("license_plate must not be blank.", "license_plate")
        return data


class VehicleCreateSchema(VehicleBaseSchema):
    pass


class VehicleUpdateSchema(VehicleBaseSchema):
    # PUT replaces the editable fields; availability keeps its value unless given
    is_available = fields.Boolean()


class VehicleOutSchema(Schema):
    id = fields.String()
    brand = fields.String()
    model = fields.String()
    year = fields.Integer()
    color = fields.String(allow_none=True)
    license_plate = fields.String()
    price = fields.Decimal(as_string=True, allow_none=True)
    is_available = fields.Boolean()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
    created_by = fields.Method("get_created_by")

    def get_created_by(self, obj):
        creator = getattr(obj, "created_by", None)
        return creator.email if creator is not None else None

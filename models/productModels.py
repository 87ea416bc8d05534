from core.extensions import db
from core.imports import datetime
from core.models import generate_object_id


class Products(db.Model):
    __tablename__ = "products"

    id = db.Column(db.String(24), primary_key=True, default=generate_object_id)
    make = db.Column(db.String(100), nullable=False)
    model = db.Column(db.String(100), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    trim = db.Column(db.String(100), nullable=True)
    mileage = db.Column(db.Integer, nullable=True)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    transmission = db.Column(db.String(20), nullable=True)  # automatic, manual, cvt, dualClutch
    fuel_type = db.Column(db.String(20), nullable=True)     # petrol, diesel, hybrid, electric, cng
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(200), nullable=False)
    contact_number = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), default="active")     # active, sold, pending

    listed_by = db.Column(db.String(24), db.ForeignKey("users.id"), nullable=False)
    seller = db.relationship("Users", backref="listings")

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "trim": self.trim,
            "mileage": self.mileage,
            "price": float(self.price),
            "transmission": self.transmission,
            "fuelType": self.fuel_type,
            "description": self.description,
            "location": self.location,
            "contactNumber": self.contact_number,
            "status": self.status,
            "listedBy": self.listed_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

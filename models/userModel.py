from core.extensions import db
from core.imports import datetime
from core.models import generate_object_id


class Users(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(24), primary_key=True, default=generate_object_id)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=True)
    password = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="buyer")  # buyer, seller, admin
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_public_dict(self):
        return {"id": self.id, "name": self.name, "email": self.email}

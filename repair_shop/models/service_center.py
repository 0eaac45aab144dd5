"""
Service center model.
"""

from repair_shop.extensions import db


class ServiceCenter(db.Model):
    """A workshop that services cars; name, address and phone are each unique."""

    __tablename__ = "service_center"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(200), unique=True, nullable=False, index=True)
    address = db.Column(db.String(300), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(20), unique=True, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<ServiceCenter {self.id}: {self.name}>"

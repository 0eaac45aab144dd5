"""
Service request model.
"""

from datetime import datetime, timezone

from repair_shop.extensions import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ServiceRequest(db.Model):
    """
    A request to service one car, placed by one customer at one
    service center.

    ``status`` is a free-form token (PENDING, IN_PROGRESS, DONE, ...).
    All three references are required; deleting the car, the customer
    or the service center deletes the request.
    """

    __tablename__ = "service_request"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    description = db.Column(db.String(1000), nullable=False)
    status = db.Column(db.String(50), nullable=False, default="PENDING")
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    car_id = db.Column(
        db.Integer,
        db.ForeignKey("car.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_id = db.Column(
        db.Integer,
        db.ForeignKey("customer.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    service_center_id = db.Column(
        db.Integer,
        db.ForeignKey("service_center.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<ServiceRequest {self.id}: {self.status}>"

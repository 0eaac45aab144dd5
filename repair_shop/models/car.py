"""
Car model and the car <-> service-center association table.
"""

from repair_shop.extensions import db

# Cars a service center has taken in.  Rows carry no data of their own,
# so a plain association table is enough.
car_service_center = db.Table(
    "car_service_center",
    db.Column(
        "car_id",
        db.Integer,
        db.ForeignKey("car.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "service_center_id",
        db.Integer,
        db.ForeignKey("service_center.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Car(db.Model):
    """
    A customer's car.

    Every car belongs to exactly one customer.  The car row is the
    owning side of that association, so an ownership transfer is a
    single-column update here.
    """

    __tablename__ = "car"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    brand = db.Column(db.String(100), nullable=False)
    model = db.Column(db.String(100), nullable=False)
    vin = db.Column(db.String(32), unique=True, nullable=False, index=True)
    year = db.Column(db.Integer, nullable=False)
    customer_id = db.Column(
        db.Integer,
        db.ForeignKey("customer.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Car {self.id}: {self.vin} (customer={self.customer_id})>"

"""
Customer model.

Customers own cars and place service requests.  The reverse views
("cars of this customer", "requests of this customer") are not mapped
here: child rows hold the customer id, and the relationship graph in
``repair_shop.cache`` derives the reverse views on demand.
"""

from repair_shop.extensions import db


class Customer(db.Model):
    """
    A repair-shop customer.

    ``email`` and ``phone`` are natural keys: both are unique in the
    store and both are lookup paths in the customer cache.
    """

    __tablename__ = "customer"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(20), unique=True, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Customer {self.id}: {self.email}>"

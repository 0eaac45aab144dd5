"""
Model package — imports all models so Alembic and SQLAlchemy can
discover them automatically when ``flask db`` commands are run.

Each model file corresponds to one table (plus its association table):
  - customer.py        -> customer
  - car.py             -> car, car_service_center
  - service_center.py  -> service_center
  - service_request.py -> service_request
"""

from repair_shop.models.customer import Customer  # noqa: F401
from repair_shop.models.car import Car, car_service_center  # noqa: F401
from repair_shop.models.service_center import ServiceCenter  # noqa: F401
from repair_shop.models.service_request import ServiceRequest  # noqa: F401

"""
Repository package — the store collaborator of the entity cache.

Repositories are the only code that issues queries.  They flush but
never commit; multi-step writes run inside ``transaction()``::

    from repair_shop.repositories import transaction
"""

from repair_shop.repositories.base import SqlAlchemyRepository, transaction  # noqa: F401
from repair_shop.repositories.car_repository import (  # noqa: F401
    CarRepository,
    ServiceCenterLinkRepository,
)
from repair_shop.repositories.customer_repository import CustomerRepository  # noqa: F401
from repair_shop.repositories.service_center_repository import (  # noqa: F401
    ServiceCenterRepository,
)
from repair_shop.repositories.service_request_repository import (  # noqa: F401
    ServiceRequestRepository,
)

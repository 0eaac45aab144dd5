"""
Service layer package.

One module per entity kind.  Services validate input and delegate every
read and write to the consistency coordinator; routes never touch the
repositories or the caches directly.

Import services in route modules as needed::

    from repair_shop.services import customer_service
"""

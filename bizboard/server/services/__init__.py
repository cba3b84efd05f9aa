"""
Server services.

Business logic behind the API routers. Services take an ``AsyncSession``,
read and write through ``QueryClient`` and commit once per operation.
"""

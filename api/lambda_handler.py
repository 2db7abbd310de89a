"""
AWS Lambda entry point.

API Gateway events are translated into ASGI calls by Mangum. Lifespan events
are off; the database pool opens lazily and lives as long as the warm container.
"""

from mangum import Mangum

from main import app

handler = Mangum(app, lifespan="off")

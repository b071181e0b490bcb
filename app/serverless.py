"""
Serverless entry point (AWS Lambda / API Gateway).

Set the function handler to: app.serverless.handler
and DEPLOYMENT_MODE=serverless so the database connects per request.
The Mangum instance and the connection manager live at module level, so
warm invocations reuse the same MongoDB client.
"""

from fastapi import FastAPI
from mangum import Mangum

from app.main import app


def build_handler(asgi_app: FastAPI) -> Mangum:
    # lifespan off: Mangum would run startup and shutdown around every
    # invocation, and shutdown closes the cached client
    return Mangum(asgi_app, lifespan="off")


handler = build_handler(app)

"""ASGI entry point for the randraw service.

Run with ``uvicorn cli:app`` from the backend directory.
"""
from randraw.infra.instrumentation import configure_instrumentation
from randraw.service.app import create_app

configure_instrumentation(service_name='randraw-service')

app = create_app()

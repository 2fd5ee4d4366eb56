"""
routrauth - Authentication core for the routrapp API and its clients.

This package provides the server side (password policy, JWT issuance and
validation, FastAPI dependencies and auth endpoints) and the client side
(token manager with proactive refresh, pluggable token storage and an
authenticated HTTP client).

Usage:
    from fastapi import FastAPI
    from routrauth.factory import configure_app

    app = FastAPI()
    configure_app(app)

    from routrauth.client import AuthClient

    async with AuthClient("https://api.example.com") as client:
        await client.login("owner@example.com", "S3cure!pass")
        response = await client.request("GET", "/api/v1/routes")
"""

__version__ = "0.1.0"

# salon/deps.py

from fastapi import HTTPException, Request


def get_store(request: Request):
    return request.app.state.store


def get_ledger(request: Request):
    return request.app.state.ledger


def get_providers(request: Request):
    return request.app.state.providers


def require_role(user, role: str):
    if user.role.value != role:
        raise HTTPException(status_code=403, detail="Forbidden")

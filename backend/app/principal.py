"""
Utilisateur authentifié, fourni par la passerelle d'authentification amont.

L'API ne gère ni mot de passe ni session : la passerelle valide l'identité et
transmet l'identifiant et le rôle dans les en-têtes X-User-Id / X-User-Role.
"""

from typing import Literal, Optional

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel

Role = Literal["admin", "teacher", "student"]


class Principal(BaseModel):
    id: int
    role: Role


def get_principal(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Principal:
    """Dépendance FastAPI : 401 si l'identité n'est pas transmise ou mal formée."""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Authentification requise.")
    try:
        return Principal(id=int(x_user_id), role=x_user_role)
    except ValueError:
        raise HTTPException(status_code=401, detail="Identité transmise invalide.")


def require_role(*roles: str):
    """Dépendance paramétrée : 403 si le rôle de l'utilisateur n'est pas autorisé."""

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in roles:
            raise HTTPException(status_code=403, detail="Rôle non autorisé pour cette opération.")
        return principal

    return dependency

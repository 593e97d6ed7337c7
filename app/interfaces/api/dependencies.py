"""FastAPI dependency utilities."""

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.domain.entities import User
from app.infrastructure.database import get_db
from app.infrastructure.identity import ActorHandleCache, get_handle_cache
from app.infrastructure.repositories import UserRepository
from app.infrastructure.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


def _invalid_credentials(detail: str = "Credenciales inválidas") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_tenant_id(
    x_tenant_id: str | None = Header(default=None, alias="X-Tenant-ID"),
) -> str:
    """Return the tenant addressed by the request."""

    tenant_id = (x_tenant_id or "").strip()
    if not tenant_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Encabezado X-Tenant-ID requerido",
        )
    return tenant_id


def resolve_viewer(token: str, db: Session, *, tenant_id: str) -> User:
    """Resolve the user identified by ``token`` inside ``tenant_id``."""

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _invalid_credentials() from exc

    slug = payload.get("sub")
    if not isinstance(slug, str) or not slug:
        raise _invalid_credentials()

    user = UserRepository(db).get_by_slug(slug, tenant_id=tenant_id)
    if user is None:
        raise _invalid_credentials("Usuario no encontrado")
    return user


def get_optional_viewer(
    token: str | None = Depends(oauth2_scheme),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> User | None:
    """Return the authenticated viewer, or ``None`` for guests."""

    if not token:
        return None
    return resolve_viewer(token, db, tenant_id=tenant_id)


def get_actor_handle_cache() -> ActorHandleCache:
    return get_handle_cache()

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from agenda.auth import jwt_handler

security = HTTPBearer()


def get_current_provider_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    provider_id = payload.get("sub")
    if not provider_id:
        raise HTTPException(status_code=401, detail="Invalid token subject")
    return provider_id

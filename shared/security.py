import time

from fastapi import Header, HTTPException, Request
from jose import jwt, JWTError, ExpiredSignatureError

ALGO = "HS256"


def make_access_token(settings, sub: str, email: str | None = None, ttl_seconds: int = 3600, **extra) -> str:
    now = int(time.time())
    payload = {
        "sub": str(sub),
        "iat": now,
        "exp": now + ttl_seconds,
        **extra,
    }
    if email:
        payload["email"] = email
    if settings.jwt_issuer:
        payload["iss"] = settings.jwt_issuer
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience

    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)


def require_user(request: Request, authorization: str = Header(default=None)) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")

    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")

    settings = request.app.state.settings
    try:
        # A configured audience or issuer must be present in the token
        options = {
            "verify_aud": bool(settings.jwt_audience),
            "require_aud": bool(settings.jwt_audience),
            "require_iss": bool(settings.jwt_issuer),
        }
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[ALGO],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options=options,
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    if not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")

    # Attach raw token so downstream services can forward it
    claims["raw_token"] = token
    return claims

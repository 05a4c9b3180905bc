"""
Routes d'authentification (inscription, connexion, déconnexion) et profil courant.

Les comptes créés par `/api/register` ne sont jamais administrateurs; l'administrateur initial est
créé au démarrage depuis la configuration.
"""

from fastapi import APIRouter, Request

from nouvel_ayiti.api.deps import current_identity_dep, service_dep
from nouvel_ayiti.api.schemas import LoginPayload, LoginResponse, RegisterPayload, UserPublic
from nouvel_ayiti.core.http_constants import HTTP_CREATED, HTTP_OK
from nouvel_ayiti.domain.auth import create_access_token
from nouvel_ayiti.domain.errors import Unauthorized

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=UserPublic, status_code=HTTP_CREATED)
def register(payload: RegisterPayload, service=service_dep):
    """Inscrit un nouvel utilisateur (409 si le nom est déjà pris)."""
    return service.register(payload.username, payload.password)


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginPayload, request: Request, service=service_dep):
    """Authentifie un utilisateur et retourne un token d'accès."""
    user = service.authenticate(payload.username, payload.password)
    if user is None:
        raise Unauthorized("Invalid credentials")
    settings = request.app.state.container.settings
    token = create_access_token(
        secret=settings.JWT_SECRET,
        alg=settings.JWT_ALG,
        expires_min=settings.JWT_EXPIRES_MIN,
        payload={"sub": str(user.id), "username": user.username, "is_admin": user.is_admin},
    )
    return LoginResponse(access_token=token, user=user.model_dump())


@router.post("/logout", status_code=HTTP_OK)
def logout():
    """Déconnexion. Les jetons sont sans état côté serveur: le client oublie le sien."""
    return {"message": "Logged out"}


@router.get("/user", response_model=UserPublic)
def current_user(identity=current_identity_dep, service=service_dep):
    return service.get_user(identity.user_id)

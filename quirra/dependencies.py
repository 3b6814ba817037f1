"""Global dependencies for the application."""

from collections.abc import Callable
from functools import lru_cache

from fastapi import Depends, Request
from langchain_core.language_models import BaseChatModel
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.core.config import settings
from quirra.core.database import get_async_session
from quirra.core.exceptions import AuthenticationError, AuthorizationError
from quirra.core.llm import build_chat_model
from quirra.core.redis import get_redis
from quirra.core.settings import LLMConfig
from quirra.repositories.chat_repo import ChatRepository
from quirra.repositories.device_repo import DeviceRepository, UserSessionRepository
from quirra.repositories.library_repo import LibraryRepository
from quirra.repositories.memory_repo import MemoryRepository
from quirra.repositories.profile_repo import ProfileRepository
from quirra.repositories.security_repo import SecurityRepository
from quirra.repositories.share_repo import ShareRepository
from quirra.repositories.wellbeing_repo import WellbeingRepository
from quirra.services.account_service import AccountDeletionService, AccountService
from quirra.services.auth_admin_client import SupabaseAuthClient
from quirra.services.chat_service import ChatService
from quirra.services.conversation_service import ConversationService
from quirra.services.device_service import DeviceService, SessionService
from quirra.services.emotional_trend_service import EmotionalTrendService
from quirra.services.library_service import LibraryService
from quirra.services.security_service import SecurityService
from quirra.services.share_service import ShareService
from quirra.services.summary_service import SummaryService
from quirra.services.token_service import TokenService
from quirra.services.wellbeing_service import WellbeingService

# --- LLM dependencies ---


def get_analysis_config() -> LLMConfig:
    return settings.analysis_llm


def get_summary_config() -> LLMConfig:
    return settings.summary_llm


def get_trend_config() -> LLMConfig:
    return settings.trend_llm


def get_chat_config() -> LLMConfig:
    return settings.chat_llm


def _model_for(config: LLMConfig, *, json_mode: bool = False) -> BaseChatModel | None:
    if not config.is_configured:
        return None
    return build_chat_model(config, json_mode=json_mode)


@lru_cache
def get_analysis_llm() -> BaseChatModel | None:
    """JSON-mode model for message analysis; None without an API key."""
    return _model_for(settings.analysis_llm, json_mode=True)


@lru_cache
def get_summary_llm() -> BaseChatModel | None:
    return _model_for(settings.summary_llm)


@lru_cache
def get_trend_llm() -> BaseChatModel | None:
    return _model_for(settings.trend_llm)


@lru_cache
def get_chat_llm() -> BaseChatModel | None:
    return _model_for(settings.chat_llm)


# --- Auth dependencies ---


class CurrentUser(BaseModel):
    """Authenticated user extracted from request state."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str | None = None
    role: str
    session_id: str | None = None


def get_current_user(request: Request) -> CurrentUser:
    """Extract the authenticated user from middleware-populated state."""
    state = getattr(request, "state", None)
    user_id = getattr(state, "user_id", None) if state else None
    if user_id is None:
        raise AuthenticationError(message="Not authenticated")
    return CurrentUser(
        id=state.user_id,
        email=state.email,
        role=state.role,
        session_id=getattr(state, "session_id", None),
    )


def get_access_token(request: Request) -> str:
    """Bearer token of the current request, for calls made on the user's behalf."""
    token = getattr(request.state, "access_token", None)
    if not token:
        raise AuthenticationError(message="Not authenticated")
    return token


def require_role(*allowed_roles: str) -> Callable[..., CurrentUser]:
    """Dependency factory that enforces role-based access control."""

    def _check(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                message=f"Role '{current_user.role}' is not permitted"
            )
        return current_user

    return _check


def get_client_ip(request: Request) -> str | None:
    """First hop of X-Forwarded-For, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def get_token_service() -> TokenService:
    """Get TokenService backed by the active Redis client."""
    return TokenService(get_redis())


def get_auth_client() -> SupabaseAuthClient:
    """Get the auth provider client."""
    return SupabaseAuthClient(settings.supabase)


# --- Repository dependencies ---


def get_chat_repository(
    session: AsyncSession = Depends(get_async_session),
) -> ChatRepository:
    """Get ChatRepository bound to the current session."""
    return ChatRepository(session)


def get_memory_repository(
    session: AsyncSession = Depends(get_async_session),
) -> MemoryRepository:
    return MemoryRepository(session)


def get_share_repository(
    session: AsyncSession = Depends(get_async_session),
) -> ShareRepository:
    return ShareRepository(session)


def get_profile_repository(
    session: AsyncSession = Depends(get_async_session),
) -> ProfileRepository:
    return ProfileRepository(session)


def get_security_repository(
    session: AsyncSession = Depends(get_async_session),
) -> SecurityRepository:
    return SecurityRepository(session)


def get_device_repository(
    session: AsyncSession = Depends(get_async_session),
) -> DeviceRepository:
    return DeviceRepository(session)


def get_user_session_repository(
    session: AsyncSession = Depends(get_async_session),
) -> UserSessionRepository:
    return UserSessionRepository(session)


def get_wellbeing_repository(
    session: AsyncSession = Depends(get_async_session),
) -> WellbeingRepository:
    return WellbeingRepository(session)


def get_library_repository(
    session: AsyncSession = Depends(get_async_session),
) -> LibraryRepository:
    return LibraryRepository(session)


# --- Service dependencies ---


def get_conversation_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
    current_user: CurrentUser = Depends(get_current_user),
) -> ConversationService:
    """Get ConversationService for the authenticated user."""
    return ConversationService(chat_repo=chat_repo, user_id=current_user.id)


def get_chat_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
    memory_repo: MemoryRepository = Depends(get_memory_repository),
    profile_repo: ProfileRepository = Depends(get_profile_repository),
    current_user: CurrentUser = Depends(get_current_user),
    chat_config: LLMConfig = Depends(get_chat_config),
    analysis_config: LLMConfig = Depends(get_analysis_config),
    chat_llm: BaseChatModel | None = Depends(get_chat_llm),
    analysis_llm: BaseChatModel | None = Depends(get_analysis_llm),
) -> ChatService:
    """Get ChatService with DB persistence and both model call sites."""
    return ChatService(
        chat_repo=chat_repo,
        memory_repo=memory_repo,
        profile_repo=profile_repo,
        user_id=current_user.id,
        chat_config=chat_config,
        analysis_config=analysis_config,
        chat_llm=chat_llm,
        analysis_llm=analysis_llm,
    )


def get_summary_service(
    memory_repo: MemoryRepository = Depends(get_memory_repository),
    current_user: CurrentUser = Depends(get_current_user),
    config: LLMConfig = Depends(get_summary_config),
    llm: BaseChatModel | None = Depends(get_summary_llm),
) -> SummaryService:
    """Get SummaryService for the authenticated user."""
    return SummaryService(
        memory_repo=memory_repo, user_id=current_user.id, config=config, llm=llm
    )


def get_emotional_trend_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
    memory_repo: MemoryRepository = Depends(get_memory_repository),
    wellbeing_repo: WellbeingRepository = Depends(get_wellbeing_repository),
    current_user: CurrentUser = Depends(get_current_user),
    config: LLMConfig = Depends(get_trend_config),
    llm: BaseChatModel | None = Depends(get_trend_llm),
) -> EmotionalTrendService:
    return EmotionalTrendService(
        chat_repo=chat_repo,
        memory_repo=memory_repo,
        wellbeing_repo=wellbeing_repo,
        user_id=current_user.id,
        config=config,
        llm=llm,
    )


def get_share_service(
    share_repo: ShareRepository = Depends(get_share_repository),
    chat_repo: ChatRepository = Depends(get_chat_repository),
) -> ShareService:
    """Get ShareService; also used by the public share route."""
    return ShareService(
        share_repo=share_repo, chat_repo=chat_repo, app_config=settings.app
    )


def get_account_service(
    profile_repo: ProfileRepository = Depends(get_profile_repository),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
    current_user: CurrentUser = Depends(get_current_user),
) -> AccountService:
    return AccountService(
        profile_repo=profile_repo,
        auth_client=auth_client,
        app_config=settings.app,
        user_id=current_user.id,
    )


def get_account_deletion_service(
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
    token_service: TokenService = Depends(get_token_service),
    session: AsyncSession = Depends(get_async_session),
    current_user: CurrentUser = Depends(get_current_user),
) -> AccountDeletionService:
    """Get AccountDeletionService with every per-user repository."""
    return AccountDeletionService(
        auth_client=auth_client,
        token_service=token_service,
        chat_repo=ChatRepository(session),
        memory_repo=MemoryRepository(session),
        share_repo=ShareRepository(session),
        profile_repo=ProfileRepository(session),
        security_repo=SecurityRepository(session),
        device_repo=DeviceRepository(session),
        user_session_repo=UserSessionRepository(session),
        wellbeing_repo=WellbeingRepository(session),
        library_repo=LibraryRepository(session),
        user_id=current_user.id,
        auth_session_id=current_user.session_id,
    )


def get_security_service(
    security_repo: SecurityRepository = Depends(get_security_repository),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
    current_user: CurrentUser = Depends(get_current_user),
) -> SecurityService:
    return SecurityService(
        security_repo=security_repo,
        auth_client=auth_client,
        app_config=settings.app,
        user_id=current_user.id,
    )


def get_device_service(
    device_repo: DeviceRepository = Depends(get_device_repository),
    current_user: CurrentUser = Depends(get_current_user),
) -> DeviceService:
    return DeviceService(device_repo=device_repo, user_id=current_user.id)


def get_session_service(
    user_session_repo: UserSessionRepository = Depends(get_user_session_repository),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
    token_service: TokenService = Depends(get_token_service),
    current_user: CurrentUser = Depends(get_current_user),
) -> SessionService:
    return SessionService(
        user_session_repo=user_session_repo,
        auth_client=auth_client,
        token_service=token_service,
        user_id=current_user.id,
        auth_session_id=current_user.session_id,
    )


def get_wellbeing_service(
    wellbeing_repo: WellbeingRepository = Depends(get_wellbeing_repository),
    current_user: CurrentUser = Depends(get_current_user),
) -> WellbeingService:
    return WellbeingService(wellbeing_repo=wellbeing_repo, user_id=current_user.id)


def get_library_service(
    library_repo: LibraryRepository = Depends(get_library_repository),
    current_user: CurrentUser = Depends(get_current_user),
) -> LibraryService:
    return LibraryService(library_repo=library_repo, user_id=current_user.id)

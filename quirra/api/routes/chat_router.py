"""Chat API router."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from langchain_core.language_models import BaseChatModel

from quirra.core.config import settings
from quirra.core.rate_limit import limiter
from quirra.dependencies import get_chat_llm, get_chat_service, require_role
from quirra.schemas.chat_schema import (
    AskRequest,
    AskResponse,
    ChatSessionResponse,
    NewChatRequest,
)
from quirra.schemas.response_schema import ApiResponse, success_response
from quirra.services.chat_service import ChatService
from quirra.services.chat_title_task import generate_session_title

router = APIRouter(
    prefix="/api",
    tags=["chat"],
    dependencies=[Depends(require_role("authenticated"))],
)

ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
ChatLLMDep = Annotated[BaseChatModel | None, Depends(get_chat_llm)]


@router.post(
    "/chat/new",
    response_model=ApiResponse[ChatSessionResponse],
    status_code=201,
)
async def create_chat_session(
    body: NewChatRequest,
    chat_service: ChatServiceDep,
) -> dict:
    """Register a new chat session id generated by the client."""
    session = await chat_service.create_session(body.session_id)
    return success_response(
        ChatSessionResponse.model_validate(session),
        status=201,
        message="Chat session created",
    )


@router.post("/ask", response_model=ApiResponse[AskResponse])
@limiter.limit(settings.auth.ask_rate_limit)
async def ask(
    request: Request,
    body: AskRequest,
    chat_service: ChatServiceDep,
    chat_llm: ChatLLMDep,
    background_tasks: BackgroundTasks,
) -> dict:
    """Answer a user turn, or reset the conversation."""
    result = await chat_service.ask(body)
    if result.needs_title and chat_llm is not None and body.prompt:
        background_tasks.add_task(
            generate_session_title,
            session_id=result.session_id,
            message=body.prompt,
            llm=chat_llm,
        )
    return success_response(result.response)


@router.post("/delete-all-history", response_model=ApiResponse[None])
async def delete_all_history(chat_service: ChatServiceDep) -> dict:
    """Delete every conversation and memory entry of the user."""
    await chat_service.delete_all_history()
    return success_response(None, message="All chat history deleted")

"""Service for generating chat session titles via LLM."""

from langchain_core.language_models import BaseChatModel

from quirra.core.llm import response_text

MAX_TITLE_LENGTH = 60


class TitleService:
    """Generates concise session titles from user messages."""

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm

    async def generate_title(self, message: str) -> str:
        """Summarise a user message into a short title in the message's language."""
        prompt = (
            "Summarize the following user message as a chat title of at most "
            "six words, in the same language as the message. "
            "Output the title only:\n"
            f"{message}"
        )
        response = await self._llm.ainvoke(prompt)
        title = response_text(response).strip("\"'").strip()
        return title[:MAX_TITLE_LENGTH]

"""
Chat orchestration
Builds folder context, asks the AI engine through a ChatTransport and records
both turns in the session state.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from docintel.core.exceptions import FolderNotFoundError, GatewayError
from docintel.schemas.state import ChatMessage, ChatUsage, DocumentFile, Folder
from docintel.services.credentials import CredentialProvider
from docintel.services.llm.transport import ChatTransport
from docintel.state.store import DataStore

logger = logging.getLogger(__name__)

LOCAL_ENGINE = "docintel"


def build_context_info(folder: Optional[Folder], files: List[DocumentFile]) -> str:
    """Describe a folder and its files for the model; empty without a folder or files."""
    if folder is None or not files:
        return ""

    total_size = sum(f.size for f in files)
    ocr_texts = "\n\n".join(f"File: {f.name}\nOCR Text: {f.ocr_text}" for f in files if f.ocr_text)
    summaries = "\n\n".join(f"File: {f.name}\nSummary: {f.summary}" for f in files if f.summary)

    context = "\n".join([
        f"Folder: {folder.name}",
        f"Files: {', '.join(f.name for f in files)}",
        f"Total files: {len(files)}",
        f"Total size: {total_size / 1024 / 1024:.2f} MB",
    ])
    if ocr_texts:
        context += f"\n\nOCR Content:\n{ocr_texts}"
    if summaries:
        context += f"\n\nFile Summaries:\n{summaries}"
    return context.strip()


def local_answer(folder: Optional[Folder], files: List[DocumentFile]) -> str:
    if folder is not None and files:
        return (
            f'Based on the analysis of the "{folder.name}" folder containing {len(files)} document(s), '
            "I can provide insights about your query. These documents contain information about "
            "various topics. What specific aspect would you like me to elaborate on?"
        )
    return "I can help you analyze documents and folders once you upload them. Please select a folder to get started."


def to_chat_usage(usage: Optional[Dict[str, Any]]) -> Optional[ChatUsage]:
    """Map Qwen (input/output) or OpenAI (prompt/completion) token counts to ChatUsage."""
    if not usage:
        return None
    total = usage.get("total_tokens")
    if total is None:
        parts = [usage.get(k) for k in ("input_tokens", "output_tokens", "prompt_tokens", "completion_tokens")]
        if not any(isinstance(p, int) for p in parts):
            return None
        total = sum(p for p in parts if isinstance(p, int))
    return ChatUsage(tokens_used=int(total), cost=0.0)


def describe_error(engine: str, error: GatewayError) -> str:
    if error.error_type == "connection_error":
        if engine == "qwen":
            return (
                "Connection to Qwen API failed. Please check: 1) Your Qwen API key is valid and active, "
                "2) Your network allows connections to dashscope.aliyuncs.com, 3) Try again in a few "
                "moments as this may be a temporary server issue."
            )
        return f"Connection to {engine.upper()} API failed. Please check your API key and network connection."
    return (
        f"Sorry, I encountered an error while processing your request: {error.error}. "
        "Please check your API configuration in Settings and try again."
    )


class ChatService:

    def __init__(self, store: DataStore, transport: ChatTransport, credentials: CredentialProvider):
        self.store = store
        self.transport = transport
        self.credentials = credentials

    async def send(
            self,
            message: str,
            engine: str,
            folder_id: Optional[str] = None,
            file_id: Optional[str] = None,
    ) -> Tuple[ChatMessage, ChatMessage]:
        """
        Send one user turn.

        The user message is recorded first, so it is counted even when the
        engine fails; failures come back as an assistant message. Storage
        writes run in a worker thread.
        """
        folder = None
        if folder_id:
            folder = self.store.get_folder(folder_id)
            if folder is None:
                raise FolderNotFoundError(folder_id)
        files = self.store.get_files_by_folder(folder.id) if folder else []

        user_message = ChatMessage(
            id=self.store.new_id(),
            content=message,
            role="user",
            file_id=file_id,
            ai_engine=engine,
        )
        await asyncio.to_thread(self.store.add_chat_message, user_message)

        content, usage = await self._answer(message, engine, folder, files)

        reply = ChatMessage(
            id=self.store.new_id(),
            content=content,
            role="assistant",
            file_id=file_id,
            ai_engine=engine,
            usage=usage,
        )
        await asyncio.to_thread(self.store.add_chat_message, reply)
        return user_message, reply

    async def _answer(
            self,
            message: str,
            engine: str,
            folder: Optional[Folder],
            files: List[DocumentFile],
    ) -> Tuple[str, Optional[ChatUsage]]:
        if engine == LOCAL_ENGINE:
            return local_answer(folder, files), None

        context_info = build_context_info(folder, files)
        api_key = await asyncio.to_thread(self.credentials.get_api_key, engine)
        logger.info(f"💬 Chat request: engine={engine}, context_files={len(files)}")
        try:
            result = await self.transport.complete(
                engine=engine,
                user_message=message,
                context_info=context_info or None,
                api_key=api_key,
            )
        except GatewayError as e:
            logger.error(f"❌ Error calling AI API: {e.error}")
            return describe_error(engine, e), None

        return result.get("content") or "", to_chat_usage(result.get("usage"))

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from trello_reports.agents.base import NarrativeGenerator
from trello_reports.core.errors import GenerationError
from trello_reports.routes.deps import get_chat_backend

logger = logging.getLogger(__name__)

router = APIRouter()


class ChatRequest(BaseModel):
    message: str


@router.post("/chat")
def chat(req: ChatRequest, backend: NarrativeGenerator = Depends(get_chat_backend)):
    """Send one message to the text-generation backend to check it is working."""
    if not req.message.strip():
        raise HTTPException(status_code=400, detail="message cannot be empty")

    try:
        response = backend.send_simple_message(req.message)
    except GenerationError as e:
        logger.error(f"Error sending chat message: {e}")
        raise HTTPException(status_code=500, detail="Error generating response")

    return {"response": response}

"""FastAPI HTTP endpoints of the agent.

    POST /interaction          {"q": "..."} -> {"q": "...", "a": "..."}
    POST /interaction/stream   {"q": "..."} -> text/plain chunks
    GET  /health
"""

import json
from contextlib import aclosing
from typing import Optional

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from ..main import DataflowTipsClient
from ..observability import ComponentLogger, new_request_id

logger = ComponentLogger("gateway")


async def _question(request: Request) -> Optional[str]:
    """The non-empty ``q`` of the JSON body, or None."""
    body = await request.body()
    if not body.strip():
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    question = payload.get("q")
    if not isinstance(question, str) or not question.strip():
        return None
    return question


def create_router(client: DataflowTipsClient) -> APIRouter:
    router = APIRouter()
    
    @router.post("/interaction")
    async def interaction(request: Request):
        question = await _question(request)
        if question is None:
            return Response(status_code=400)
        
        request_id = new_request_id()
        try:
            answer = await client.ask(question, request_id=request_id)
        except Exception as e:
            logger.error("Interaction failed", request_id=request_id, error=e, exc_info=True)
            return JSONResponse(status_code=500, content={"q": question, "a": str(e)})
        return {"q": question, "a": answer}
    
    @router.post("/interaction/stream")
    async def interaction_stream(request: Request):
        question = await _question(request)
        if question is None:
            return Response(status_code=400)
        
        request_id = new_request_id()
        
        async def chunks():
            try:
                async with aclosing(client.stream(question, request_id=request_id)) as stream:
                    async for chunk in stream:
                        yield chunk
            except Exception as e:
                # Headers are already sent, the error can only be appended to the body
                logger.error("Streaming interaction failed", request_id=request_id, error=e, exc_info=True)
                yield f"\n[error] {e}"
        
        return StreamingResponse(
            chunks(),
            media_type="text/plain",
            headers={"Cache-Control": "no-cache"}
        )
    
    @router.get("/health")
    async def health():
        return {"status": "ok"}
    
    return router


def create_app(client: Optional[DataflowTipsClient] = None) -> FastAPI:
    app = FastAPI(title="Dataflow tips agent")
    app.include_router(create_router(client or DataflowTipsClient()))
    return app

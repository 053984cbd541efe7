# Comment board REST/HTML service built on opbridge controllers.
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.responses import HTMLResponse

from opbridge import OperationController, config_from_env
from opbridge.app.html import render_operation_html
from opbridge.domain.ports import Params
from opbridge.utils.logging import configure_root, level_name

from .comments import COMMENTS, CreateComment, ShowComment, UpdateComment
from .errors import install_error_handlers

API_KEY = os.getenv("COMMENTS_API_KEY", "")

# Rails-style form noise that operations never need.
_IGNORED_PARAMS = ("utf8", "authenticity_token", "commit", "_method")

log = logging.getLogger(__name__)


# ---------- Controller ----------
class CommentsController(OperationController):
    """Drops form noise and trims submitted strings before any verb runs."""

    def process_params(self, params: Params) -> Params:
        for key in _IGNORED_PARAMS:
            params.pop(key, None)
        for key, value in list(params.items()):
            if isinstance(value, dict):
                params[key] = {
                    name: item.strip() if isinstance(item, str) else item
                    for name, item in value.items()
                }
        return params


comments_controller = CommentsController.provider()


# ---------- Startup ----------
@asynccontextmanager
async def lifespan(app: FastAPI):
    level = configure_root()
    app.state.opbridge_config = config_from_env()
    log.info(
        "Comment board ready (log level %s, html formats: %s)",
        level_name(level),
        ", ".join(app.state.opbridge_config.html_formats),
    )
    yield


app = FastAPI(title="Comment Board API", version="0.1.0", lifespan=lifespan)
install_error_handlers(app)


# ---------- Auth Helper ----------
def require_key(x_api_key: Optional[str]):
    if API_KEY and x_api_key != API_KEY:
        raise HTTPException(401, "Unauthorized")


# ---------- Health ----------
@app.get("/health")
def health() -> Dict[str, Any]:
    return {"ok": True, "comments": len(COMMENTS.all())}


# ---------- Comments ----------
@app.get("/comments/new", response_class=HTMLResponse)
def new_comment(controller: CommentsController = Depends(comments_controller)):
    controller.form(CreateComment)
    return HTMLResponse(render_operation_html(controller.operation, controller.request))


@app.post("/comments")
def create_comment(
    controller: CommentsController = Depends(comments_controller),
    x_api_key: Optional[str] = Header(None),
):
    require_key(x_api_key)
    return controller.respond(
        CreateComment,
        on_success=lambda op: log.info("Created comment %s", op.model.id),
    )


@app.get("/comments/{id}")
def show_comment(controller: CommentsController = Depends(comments_controller)):
    result = controller.present(ShowComment)
    return controller.responder.respond(result.operation, ok=True, request=controller.request)


@app.get("/comments/{id}/edit", response_class=HTMLResponse)
def edit_comment(controller: CommentsController = Depends(comments_controller)):
    controller.form(UpdateComment)
    return HTMLResponse(render_operation_html(controller.operation, controller.request))


@app.api_route("/comments/{id}", methods=["POST", "PUT", "PATCH"])
def update_comment(
    controller: CommentsController = Depends(comments_controller),
    x_api_key: Optional[str] = Header(None),
):
    require_key(x_api_key)
    return controller.respond(UpdateComment)


# ---------- Admin ----------
@app.post("/admin/comments")
def admin_create_comment(
    controller: CommentsController = Depends(comments_controller),
    x_api_key: Optional[str] = Header(None),
):
    require_key(x_api_key)
    return controller.respond(CreateComment, namespace="admin")

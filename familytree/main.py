import logging
import os

from fastapi import FastAPI, Depends, File, HTTPException, Request, Response, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse

from .db import get_conn
from . import auth, crud, schemas, storage
from .tree_layout.engine import compute_layout
from .tree_layout.models import snapshot_from_records
from .tree_layout import plotly_render

logger = logging.getLogger(__name__)

CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "http://localhost:5173")

app = FastAPI(title="Family Tree")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def _set_session(response: Response, user_id: str):
    response.set_cookie(
        auth.SESSION_COOKIE,
        auth.create_session_token(user_id),
        max_age=auth.SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
    )


def _load_snapshot(conn):
    return snapshot_from_records(crud.get_snapshot(conn))


# ── UI ──

@app.get("/", include_in_schema=False)
def ui(conn=Depends(get_conn)):
    members, relationships = _load_snapshot(conn)
    fig = plotly_render.build_plotly_figure(members, relationships)
    return HTMLResponse(plotly_render.render_html(fig))


# ── Auth ──

@app.post("/api/auth/register", response_model=schemas.UserOut)
def register(body: schemas.RegisterRequest, response: Response, conn=Depends(get_conn)):
    try:
        user = auth.create_user(conn, body.email, body.name, body.password)
    except ValueError as e:
        raise HTTPException(400, str(e))
    _set_session(response, user["id"])
    return user


@app.post("/api/auth/login", response_model=schemas.UserOut)
def login(body: schemas.LoginRequest, response: Response, conn=Depends(get_conn)):
    user = auth.authenticate_user(conn, body.email, body.password)
    if not user:
        raise HTTPException(401, "Invalid email or password")
    _set_session(response, user["id"])
    return user


@app.post("/api/auth/logout")
def logout(response: Response):
    response.delete_cookie(auth.SESSION_COOKIE)
    return {"ok": True}


@app.get("/api/auth/me", response_model=schemas.UserOut)
def me(user=Depends(auth.get_current_user)):
    return user


@app.get("/api/auth/session", response_model=schemas.SessionOut)
def session(user=Depends(auth.get_optional_user)):
    return {"user": user}


# ── Members ──

@app.get("/api/members", response_model=schemas.TreeOut)
def tree(conn=Depends(get_conn)):
    return crud.get_snapshot(conn)


@app.post("/api/members", response_model=schemas.MemberOut, status_code=201)
def add_member(body: schemas.MemberCreate, conn=Depends(get_conn),
               user=Depends(auth.get_current_user)):
    return crud.create_member(
        conn, body.first_name, body.last_name,
        birth_date=body.birth_date.isoformat() if body.birth_date else None,
        death_date=body.death_date.isoformat() if body.death_date else None,
        photo_url=body.photo_url,
        bio=body.bio,
    )


@app.put("/api/members/{member_id}", response_model=schemas.MemberOut)
def edit_member(member_id: str, body: schemas.MemberUpdate, conn=Depends(get_conn),
                user=Depends(auth.get_current_user)):
    try:
        member = crud.update_member(conn, member_id, body.changes())
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not member:
        raise HTTPException(404, "Not found")
    return member


@app.delete("/api/members/{member_id}")
def remove_member(member_id: str, conn=Depends(get_conn),
                  user=Depends(auth.get_current_user)):
    if not crud.delete_member(conn, member_id):
        raise HTTPException(404, "Not found")
    return {"success": True}


# ── Relationships ──

@app.post("/api/relationships", response_model=schemas.RelationshipOut, status_code=201)
def add_relationship(body: schemas.RelCreate, conn=Depends(get_conn),
                     user=Depends(auth.get_current_user)):
    try:
        return crud.create_relationship(conn, body.member_id, body.related_member_id, body.type)
    except ValueError as e:
        raise HTTPException(400, str(e))


@app.delete("/api/relationships/{rel_id}")
def remove_relationship(rel_id: str, conn=Depends(get_conn),
                        user=Depends(auth.get_current_user)):
    if not crud.delete_relationship(conn, rel_id):
        raise HTTPException(404, "Not found")
    return {"success": True}


# ── Uploads ──

@app.post("/api/upload", response_model=schemas.UploadOut, status_code=201)
async def upload(file: UploadFile | None = File(None), user=Depends(auth.get_current_user)):
    if file is None:
        raise HTTPException(400, "No file provided")
    try:
        storage.file_extension(file.filename)
        data = await storage.read_limited(file)
        url = storage.save_upload(file.filename, data)
    except ValueError as e:
        logger.warning("Rejected upload %r: %s", file.filename, e)
        raise HTTPException(400, str(e))
    return {"url": url}


@app.get("/uploads/{name}", include_in_schema=False)
def uploaded_file(name: str):
    path = storage.upload_path(name)
    if path is None:
        raise HTTPException(404, "Not found")
    return FileResponse(path, headers={"X-Content-Type-Options": "nosniff"})


# ── Layout ──

@app.get("/api/layout", response_model=schemas.LayoutOut)
def layout(conn=Depends(get_conn)):
    members, relationships = _load_snapshot(conn)
    return compute_layout(members, relationships).to_dict()


@app.get("/api/layout/figure")
def layout_figure(conn=Depends(get_conn)):
    members, relationships = _load_snapshot(conn)
    fig = plotly_render.build_plotly_figure(members, relationships)
    return JSONResponse(plotly_render.figure_json(fig))


@app.get("/health")
def health():
    return {"ok": True}

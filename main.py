from fastapi import FastAPI, Depends, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import List, Optional
import logging

import config
import crud
import exporter
import schemas
from auth import authenticate_user, create_access_token, get_current_user
from caching import cached_json
from database import Base, engine, get_db
from errors import VezirError
from logging_setup import setup_logging
from models import User
from notifications import build_dashboard
from task_filters import filter_and_sort

setup_logging(config.LOG_LEVEL, config.LOG_FILE or None)
logger = logging.getLogger("vezir.api")

Base.metadata.create_all(bind=engine)
# Initialize app
app = FastAPI(title="Vezir")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error mapping

@app.exception_handler(VezirError)
def handle_domain_error(request: Request, exc: VezirError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = err.get("msg", "Invalid value").removeprefix("Value error, ")
        errors.append({"field": ".".join(loc), "message": message})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": errors},
    )


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/api/health")
def health_check():
    return {"status": "healthy", "service": "vezir-api"}


# Register
@app.post("/register", status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, db: Session = Depends(get_db)):
    new_user = crud.create_user(db, user)
    return {"message": "User created successfully", "user": schemas.UserOut.model_validate(new_user)}


# Login
@app.post("/login", response_model=schemas.Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        logger.warning("Failed login for %s", form_data.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": user.email})
    return {"access_token": access_token, "token_type": "bearer"}


@app.get("/profile", response_model=schemas.UserOut)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


# Tasks

def _task_payload(task) -> dict:
    return schemas.TaskOut.model_validate(task).model_dump(mode="json", by_alias=True)


@app.get("/api/tasks")
def list_tasks(
    request: Request,
    search: str = "",
    status_filter: str = Query("", alias="status"),
    category_id: str = Query("", alias="categoryId"),
    sort_by: str = Query("newest", alias="sortBy"),
    priority_first: bool = Query(False, alias="priorityFirst"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    tasks = filter_and_sort(
        crud.list_tasks(db, user),
        search=search,
        status=status_filter,
        category_id=category_id,
        sort_by=sort_by,
        priority_first=priority_first,
    )
    return cached_json(request, {"tasks": [_task_payload(task) for task in tasks]})


@app.post("/api/tasks", response_model=schemas.TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(task: schemas.TaskCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return crud.create_task(db, user, task)


@app.get("/api/tasks/export")
def export_tasks(
    format: str = Query(exporter.FORMAT_JSON),
    export_method: str = Query(exporter.METHOD_FILTERED, alias="exportMethod"),
    task_ids: List[str] = Query([], alias="taskIds"),
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = None,
    category_id: Optional[str] = Query(None, alias="categoryId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    filters = exporter.ExportFilters(
        status=status_filter,
        priority=priority,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date,
    )
    try:
        now = datetime.now()
        chosen = exporter.select_for_export(
            crud.list_tasks(db, user), export_method, task_ids=task_ids, filters=filters
        )
        exported = exporter.export_tasks(chosen, now)

        if format == exporter.FORMAT_CSV:
            body, filename = exporter.render_csv(exported, export_method, now.date())
            return Response(
                content=body,
                media_type="text/csv",
                headers={"Content-Disposition": f'attachment; filename="{filename}"'},
            )
        return exporter.render_json(exported, export_method, now, task_ids=task_ids, filters=filters)
    except Exception:
        logger.exception("Error exporting tasks for user %s", user.id)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/tasks/notifications", response_model=schemas.DashboardOut)
def task_notifications(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    board = build_dashboard(crud.list_tasks(db, user))
    return schemas.DashboardOut.model_validate(board)


@app.get("/api/tasks/{task_id}")
def get_task(task_id: str, request: Request, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return cached_json(request, _task_payload(crud.get_task(db, user, task_id)))


# Update task
@app.put("/api/tasks/{task_id}", response_model=schemas.TaskOut)
def update_task(
    task_id: str,
    task: schemas.TaskUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return crud.update_task(db, user, task_id, task)


@app.patch("/api/tasks/{task_id}/status", response_model=schemas.TaskOut)
def update_task_status(
    task_id: str,
    body: schemas.TaskStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return crud.set_task_status(db, user, task_id, body.status.value)


@app.delete("/api/tasks/{task_id}")
def delete_task(task_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    crud.delete_task(db, user, task_id)
    return {"message": "Task deleted successfully"}


# Categories

def _category_payload(category) -> dict:
    return schemas.CategoryOut.model_validate(category).model_dump(mode="json", by_alias=True)


@app.get("/api/categories")
def list_categories(request: Request, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    categories = crud.list_categories(db, user)
    return cached_json(request, {"categories": [_category_payload(c) for c in categories]})


@app.post("/api/categories", status_code=status.HTTP_201_CREATED)
def create_category(
    category: schemas.CategoryCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"category": _category_payload(crud.create_category(db, user, category))}


@app.get("/api/categories/{category_id}")
def get_category(
    category_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    category = crud.get_category(db, user, category_id)
    return cached_json(
        request,
        _category_payload(category),
        cache_control=f"private, max-age={config.CATEGORY_CACHE_MAX_AGE}, stale-while-revalidate=60",
    )


@app.put("/api/categories/{category_id}", response_model=schemas.CategoryOut)
def update_category(
    category_id: str,
    category: schemas.CategoryUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return crud.update_category(db, user, category_id, category)


@app.delete("/api/categories/{category_id}")
def delete_category(category_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    crud.delete_category(db, user, category_id)
    return {"message": "Category deleted successfully"}

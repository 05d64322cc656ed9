"""Persistence operations for users, categories and tasks.

Every lookup is scoped to the owning user: a row that exists but belongs to
someone else is reported exactly like a missing one.
"""

import logging
from typing import Iterable, List

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

import config
from auth import get_password_hash
from database import transaction
from errors import ConflictError, NotFoundError, ValidationError
from models import Category, Task, TaskCategory, User, utcnow
from schemas import CategoryCreate, CategoryUpdate, TaskCreate, TaskUpdate, UserCreate

logger = logging.getLogger(__name__)


# Users

def create_user(db: Session, data: UserCreate) -> User:
    existing = db.query(User).filter(User.email == data.email).first()
    if existing:
        raise ValidationError("Email already exists")

    user = User(
        name=data.name,
        email=data.email,
        hashed_password=get_password_hash(data.password),
    )
    with transaction(db):
        db.add(user)
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


# Categories

def list_categories(db: Session, user: User) -> List[Category]:
    return (
        db.query(Category)
        .options(selectinload(Category.task_links))
        .filter(Category.user_id == user.id)
        .order_by(Category.name.asc())
        .all()
    )


def get_category(db: Session, user: User, category_id: str) -> Category:
    category = (
        db.query(Category)
        .options(selectinload(Category.task_links))
        .filter(Category.id == category_id, Category.user_id == user.id)
        .first()
    )
    if category is None:
        raise NotFoundError("Category not found")
    return category


def create_category(db: Session, user: User, data: CategoryCreate) -> Category:
    category = Category(
        name=data.name,
        color=data.color or config.DEFAULT_CATEGORY_COLOR,
        user_id=user.id,
    )
    with transaction(db):
        db.add(category)
    db.refresh(category)
    logger.info("User %s created category %s", user.id, category.id)
    return category


def update_category(db: Session, user: User, category_id: str, data: CategoryUpdate) -> Category:
    with transaction(db):
        category = get_category(db, user, category_id)
        category.name = data.name
        category.color = data.color
        category.updated_at = utcnow()
    return get_category(db, user, category_id)


def delete_category(db: Session, user: User, category_id: str) -> None:
    with transaction(db):
        category = get_category(db, user, category_id)
        task_count = (
            db.query(func.count(TaskCategory.task_id))
            .filter(TaskCategory.category_id == category.id)
            .scalar()
        )
        if task_count > 0:
            logger.warning(
                "Refused to delete category %s: %d task(s) still use it", category.id, task_count
            )
            raise ConflictError("Cannot delete category with associated tasks")
        db.delete(category)
    logger.info("User %s deleted category %s", user.id, category_id)


# Tasks

def _with_categories(query):
    return query.options(selectinload(Task.category_links).selectinload(TaskCategory.category))


def list_tasks(db: Session, user: User) -> List[Task]:
    return (
        _with_categories(db.query(Task))
        .filter(Task.user_id == user.id)
        .order_by(Task.created_at.desc())
        .all()
    )


def get_task(db: Session, user: User, task_id: str) -> Task:
    task = _with_categories(db.query(Task)).filter(Task.id == task_id, Task.user_id == user.id).first()
    if task is None:
        raise NotFoundError("Task not found")
    return task


def _owned_task(db: Session, user: User, task_id: str) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == user.id).first()
    if task is None:
        raise NotFoundError("Task not found")
    return task


def _owned_categories(db: Session, user: User, category_ids: Iterable[str]) -> List[Category]:
    wanted = list(dict.fromkeys(category_ids))
    if not wanted:
        return []
    categories = (
        db.query(Category)
        .filter(Category.id.in_(wanted), Category.user_id == user.id)
        .all()
    )
    if len(categories) != len(wanted):
        raise ValidationError("Some categories do not exist or don't belong to you")
    return categories


def _replace_links(db: Session, task: Task, categories: List[Category]) -> None:
    db.query(TaskCategory).filter(TaskCategory.task_id == task.id).delete(
        synchronize_session="fetch"
    )
    db.add_all(TaskCategory(task_id=task.id, category_id=category.id) for category in categories)


def create_task(db: Session, user: User, data: TaskCreate) -> Task:
    with transaction(db):
        categories = _owned_categories(db, user, data.category_ids)
        task = Task(
            title=data.title,
            description=data.description or "",
            status=data.status.value,
            priority=data.priority.value,
            due_date=data.due_date,
            user_id=user.id,
        )
        db.add(task)
        db.flush()
        db.add_all(TaskCategory(task_id=task.id, category_id=c.id) for c in categories)
    logger.info("User %s created task %s", user.id, task.id)
    return get_task(db, user, task.id)


def update_task(db: Session, user: User, task_id: str, data: TaskUpdate) -> Task:
    with transaction(db):
        task = _owned_task(db, user, task_id)
        categories = _owned_categories(db, user, data.category_ids)
        task.title = data.title
        task.description = data.description or ""
        task.status = data.status.value
        task.priority = data.priority.value
        task.due_date = data.due_date
        task.updated_at = utcnow()
        _replace_links(db, task, categories)
    return get_task(db, user, task_id)


def set_task_status(db: Session, user: User, task_id: str, status: str) -> Task:
    with transaction(db):
        task = _owned_task(db, user, task_id)
        task.status = status
        task.updated_at = utcnow()
    return get_task(db, user, task_id)


def delete_task(db: Session, user: User, task_id: str) -> None:
    with transaction(db):
        task = _owned_task(db, user, task_id)
        # Join rows first, then the task itself.
        db.query(TaskCategory).filter(TaskCategory.task_id == task.id).delete(
            synchronize_session="fetch"
        )
        db.delete(task)
    logger.info("User %s deleted task %s", user.id, task_id)

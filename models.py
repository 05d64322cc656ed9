from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime, timezone
import enum
import uuid


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id():
    return str(uuid.uuid4())


class TaskStatus(str, enum.Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class TaskPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100))
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    tasks = relationship("Task", back_populates="user")
    categories = relationship("Category", back_populates="user")


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    color = Column(String(20), nullable=False, default="#3b82f6")
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="categories")
    task_links = relationship("TaskCategory", back_populates="category")

    @property
    def task_count(self):
        return len(self.task_links)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    status = Column(String(20), default=TaskStatus.TODO.value, nullable=False)
    priority = Column(String(20), default=TaskPriority.MEDIUM.value)
    due_date = Column(Date, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="tasks")
    category_links = relationship("TaskCategory", back_populates="task")

    @property
    def categories(self):
        return [link.category for link in self.category_links]


class TaskCategory(Base):
    __tablename__ = "task_categories"

    task_id = Column(String(36), ForeignKey("tasks.id"), primary_key=True)
    category_id = Column(String(36), ForeignKey("categories.id"), primary_key=True, index=True)
    assigned_at = Column(DateTime, default=utcnow, nullable=False)

    task = relationship("Task", back_populates="category_links")
    category = relationship("Category", back_populates="task_links")

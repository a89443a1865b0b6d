from typing import Annotated

from fastapi import Depends
from sqlmodel import SQLModel, create_engine, Session

from .config import settings

# Import models so their tables are registered on SQLModel.metadata
from .models import TimerSession, UserTagStats  # noqa: F401
from .users.models import User  # noqa: F401

DATABASE_URL = settings.database_url

connect_args = {}

if DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    DATABASE_URL, echo=settings.database_echo, connect_args=connect_args
)


def get_session():
    with Session(engine) as session:
        yield session


def create_db_and_tables():
    SQLModel.metadata.create_all(engine)


SessionDep = Annotated[Session, Depends(get_session)]

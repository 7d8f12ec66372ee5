# clientkeeper/db.py

from sqlmodel import SQLModel, create_engine, Session

from clientkeeper.config import DATABASE_URL, SQL_ECHO

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False  # required for SQLite + FastAPI

# Engine = connection to the database
engine = create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    connect_args=connect_args,
)


def create_db_and_tables(bind=engine):
    # models must be imported so their tables are registered on the metadata
    from clientkeeper import models  # noqa: F401

    SQLModel.metadata.create_all(bind)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session

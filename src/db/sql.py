import time
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from db.model.base import BaseModel
from util import log
from util.config import config
from util.error_codes import KEY_STORE_FAILED
from util.errors import StoreError

engine: Engine
LocalSession: sessionmaker


def initialize_db(
    db_url: str = config.db_url.get_secret_value(),
    multi_connection_setup: bool = True,
) -> tuple[Engine, sessionmaker]:
    global engine, LocalSession
    engine = __create_db_engine(db_url, multi_connection_setup = multi_connection_setup)
    # noinspection PyPep8Naming
    LocalSession = sessionmaker(autocommit = False, autoflush = False, bind = engine)
    BaseModel.metadata.create_all(bind = engine)
    return engine, LocalSession


def __create_db_engine(
    db_url: str,
    max_retries: int = 7,
    retry_interval_s: int = 5,
    multi_connection_setup: bool = True,
) -> Engine:
    engine_options: dict = {}
    if db_url.startswith("sqlite"):
        # sessions cross the threadpool and the event loop
        engine_options["connect_args"] = {"check_same_thread": False}
    if multi_connection_setup:
        engine_options.update(
            pool_pre_ping = True,  # drop dead connections before handing them out
            pool_recycle = 300,    # seconds
            pool_size = 3,
            max_overflow = 10,
            pool_timeout = 10,     # seconds
        )
    for attempt in range(1, max_retries + 1):
        try:
            created_engine = create_engine(db_url, **engine_options)
            with created_engine.connect():
                log.d("Key store connected")
                return created_engine
        except OperationalError as e:
            log.w(f"Key store connection attempt {attempt}/{max_retries} failed, retrying in {retry_interval_s}s", e)
            time.sleep(retry_interval_s)
    raise StoreError(f"Failed to connect to the key store after {max_retries} attempts", KEY_STORE_FAILED)


# noinspection PyPep8Naming,PyShadowingNames
def get_session() -> Generator[Session, None, None]:
    db = LocalSession()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_detached_session() -> Generator[Session, None, None]:
    session_generator = get_session()
    db = next(session_generator)
    try:
        yield db
    finally:
        session_generator.close()

from sqlalchemy.orm import Session

from db.crud.api_key import ApiKeyCRUD
from db.sql import initialize_db


class SQLUtil:
    __session: Session
    __is_session_active: bool

    def __init__(self):
        self.__is_session_active = False
        self.start_session()
        self.__is_session_active = True

    def start_session(self) -> Session:
        # noinspection PyPep8Naming
        engine, LocalSession = initialize_db("sqlite:///:memory:", multi_connection_setup = False)

        if self.__is_session_active:
            self.end_session()

        self.__session = LocalSession()
        self.__is_session_active = True

        return self.__session

    def get_session(self):
        return self.__session

    def end_session(self):
        self.__session.close()
        self.__is_session_active = False

    def api_key_crud(self) -> ApiKeyCRUD:
        if not self.__is_session_active:
            self.start_session()
        return ApiKeyCRUD(self.__session)

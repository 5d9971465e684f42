from __future__ import annotations

from abc import ABC, abstractmethod
from collections import namedtuple
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from psycopg import ProgrammingError
from psycopg.conninfo import conninfo_to_dict, make_conninfo

from txdb.exception import TxdbError

ConninfoMapping = namedtuple("ConninfoMapping", ("key", "cast"))


def _port(value: str) -> Any:
    # Multi host conninfo lists one port per host
    return int(value) if value.isdigit() else value


CONNINFO_MAPPING = {
    "host": ConninfoMapping("_host", str),
    "user": ConninfoMapping("_user", str),
    "password": ConninfoMapping("_password", str),
    "port": ConninfoMapping("_port", _port),
    "dbname": ConninfoMapping("_db", str),
}
REDACTED = "..."


class BaseInterface(ABC):
    @abstractmethod
    def _setup_pool(self): ...

    @abstractmethod
    def open(self): ...

    @abstractmethod
    def close(self): ...

    @abstractmethod
    def connection(self, timeout: Optional[float] = None): ...

    @abstractmethod
    def stats(self) -> Dict[str, int]: ...

    def __init__(
        self,
        dsn: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        db: Optional[str] = None,
        query: Optional[str] = None,
        min_size: int = 4,
        max_size: Optional[int] = None,
    ) -> None:
        """DB class initialization.

        A `dsn` is handed to the pool exactly as given, so anything libpq
        accepts works: a `postgresql://` URL or a `key=value` string. The
        keyword arguments are only used when there is no `dsn`.

        Args:
            dsn (str, optional): DB data source name
            host (str, optional): DB address URL or IP
            port (int, optional): DB port. Defaults to 5432
            user (str, optional): DB user
            password (str, optional): DB password
            db (str, optional): DB name
            query (str, optional): Extra connection parameters in URL
                query form, e.g. `sslmode=require`. Defaults to None
            min_size (int, optional): Minimum number of connections in pool. Defaults to 4
            max_size (int, optional): Maximum number of connections in pool. Defaults to None, meaning `min_size`
        """

        if dsn and host:
            raise TxdbError("Cannot connect to DB using host and dsn")

        if not dsn:
            if port and (
                not isinstance(port, int) or port not in range(0, 65536)
            ):
                raise TxdbError(
                    "port: must be an integer between 0 and 65535"
                )

            if host and (not isinstance(host, str) or not len(host) > 0):
                raise TxdbError(
                    "host: must be a string at least 1 character long"
                )

        if password is not None and (
            not isinstance(password, str) or not len(password) > 0
        ):
            raise TxdbError(
                "password: must be a string at least 1 character long"
            )

        if min_size < 0 or (max_size is not None and max_size < min_size):
            raise TxdbError(
                "max_size: must not be smaller than min_size"
            )

        self._dsn = dsn
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._db = db
        self._query = query
        self._min_size = min_size
        self._max_size = max_size
        self._full_dsn: Optional[str] = None

        self._populate_connection_args()
        self._populate_dsn()
        self._setup_pool()

    def __str__(self) -> str:
        return f"<{self.__class__.__name__} {self.dsn}>"

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def _populate_connection_args(self):
        if not self._dsn:
            self._host = self._host or "localhost"
            self._port = self._port or 5432
            return

        try:
            params = conninfo_to_dict(self._dsn)
        except ProgrammingError as e:
            raise TxdbError(f"dsn: {e}") from e

        for key, mapping in CONNINFO_MAPPING.items():
            value = params.get(key)
            if value is not None:
                setattr(self, mapping.key, mapping.cast(str(value)))

    def _populate_dsn(self):
        if self._dsn:
            self._full_dsn = self._dsn
        else:
            params = dict(parse_qsl(self._query or ""))
            try:
                self._full_dsn = make_conninfo(
                    host=self.host,
                    port=self.port,
                    user=self.user,
                    password=self.password,
                    dbname=self.db,
                    **params,
                )
            except ProgrammingError as e:
                raise TxdbError(f"query: {e}") from e

        self._dsn = (
            make_conninfo(self._full_dsn, password=REDACTED)
            if self.password
            else self._full_dsn
        )

    @property
    def dsn(self):
        """The connection string with the password redacted"""
        return self._dsn

    @property
    def host(self):
        return self._host

    @property
    def port(self):
        return self._port

    @property
    def user(self):
        return self._user

    @property
    def password(self):
        return self._password

    @property
    def db(self):
        return self._db

    @property
    def full_dsn(self):
        return self._full_dsn

    @property
    def min_size(self):
        return self._min_size

    @property
    def max_size(self):
        return self._max_size

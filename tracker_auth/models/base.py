import datetime
import sqlalchemy.orm


class Base(sqlalchemy.orm.DeclarativeBase):
    pass


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)

"""数据库配置"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import event
from pathlib import Path

from .config import settings


def _ensure_sqlite_dir(database_url: str) -> None:
    """确保 SQLite 数据文件所在目录存在"""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


_ensure_sqlite_dir(settings.DATABASE_URL)

# 创建异步引擎
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    future=True,
)

# 异步会话工厂
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """模型基类"""
    pass


def set_sqlite_pragma(dbapi_connection, connection_record):
    """SQLite 连接参数：开启外键约束（级联删除依赖它）并做性能优化"""
    # 关闭驱动自带的隐式事务，由 SQLAlchemy 发出 BEGIN，SAVEPOINT 才能正常工作
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA temp_store=MEMORY")
    cursor.close()


def begin_sqlite_transaction(conn):
    """显式开启事务"""
    conn.exec_driver_sql("BEGIN")


def configure_sqlite(async_engine) -> None:
    """为 SQLite 引擎注册连接参数和事务事件"""
    event.listen(async_engine.sync_engine, "connect", set_sqlite_pragma)
    event.listen(async_engine.sync_engine, "begin", begin_sqlite_transaction)


if engine.dialect.name == "sqlite":
    configure_sqlite(engine)


async def init_db():
    """初始化数据库表"""
    # 导入模型以注册到 Base.metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """获取数据库会话（每个请求一个事务，异常时回滚）"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

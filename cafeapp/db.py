from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from cafeapp.core.config import settings

# Base de modelos; cafeapp.main importa los modelos antes de create_all
Base = declarative_base()

_IS_SQLITE = settings.database_url.startswith("sqlite")

engine = create_engine(
    settings.database_url,
    # timeout alto: checkout y acciones del tablero escriben a la vez
    connect_args={"check_same_thread": False, "timeout": 60} if _IS_SQLITE else {},
    pool_pre_ping=True,
)

if _IS_SQLITE:

    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_conn, _):
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute("PRAGMA busy_timeout=60000;")
            cur.execute("PRAGMA synchronous=NORMAL;")
        finally:
            cur.close()


# el document store abre y cierra una sesión por operación
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

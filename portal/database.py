from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from portal.config import settings

connect_args = {}
engine_kwargs = {"pool_pre_ping": True}

if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
else:
    engine_kwargs["pool_size"] = 10
    engine_kwargs["max_overflow"] = 20

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    **engine_kwargs
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    # Tabellenmodelle importieren, damit sie in Base.metadata registriert sind.
    # Das Schema selbst wird in Supabase gepflegt; create_all legt nur fehlende
    # Tabellen für die lokale Entwicklung an.
    import portal.models.portal_db  # noqa: F401
    import portal.models.notification_db  # noqa: F401
    import portal.models.review_db  # noqa: F401
    Base.metadata.create_all(bind=engine)

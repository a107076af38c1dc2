# ============================================================
# db.py — Moteur SQLModel et session par requête
# ============================================================
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import config


def make_engine(url: str):
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # base en mémoire : une seule connexion partagée
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


engine = make_engine(config.DATABASE_URL)


def init_db():
    # crée les tables (Booking + Review)
    import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


# Dépendance FastAPI : fournit une Session DB par requête, auto-close
def get_session():
    with Session(engine) as s:
        yield s

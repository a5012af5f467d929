from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()


def make_engine(url: str, echo: bool = False) -> Engine:
    """Engine SQLAlchemy pour l'URL donnée"""
    connect_args = {}
    if url.startswith("sqlite"):
        # SQLite refuse le partage de connexion entre threads par défaut
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=echo, connect_args=connect_args, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

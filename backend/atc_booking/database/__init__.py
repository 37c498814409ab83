"""Database package: engine, session factory and declarative base."""

from .engines import Base, SessionLocal, build_engine, engine, get_db

__all__ = ["Base", "SessionLocal", "build_engine", "engine", "get_db"]

"""SQLAlchemy models for database integration."""

from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, \
    UniqueConstraint
from sqlalchemy.orm import relationship

db: SQLAlchemy = SQLAlchemy()


class DBApp(db.Model):
    """Persistence for :class:`domain.App`."""

    __tablename__ = 'app'

    app_id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(255), nullable=False, index=True)
    created = Column(DateTime, default=datetime.now)

    slug = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    website = Column(String(255))
    callback_url = Column(String(255))

    api_key = Column(String(255), nullable=False, unique=True)
    secret = Column(String(255), nullable=False, unique=True)

    connections = relationship('DBAppConnection', back_populates='app',
                               cascade='all, delete-orphan')


class DBAppConnection(db.Model):
    """Persistence for :class:`domain.AppConnection`."""

    __tablename__ = 'app_connection'
    __table_args__ = (
        UniqueConstraint('app_id', 'account_id',
                         name='uq_app_connection_app_account'),
    )

    connection_id = Column(Integer, primary_key=True, autoincrement=True)
    app_id = Column(ForeignKey('app.app_id', ondelete='CASCADE'),
                    nullable=False)
    account_id = Column(String(255), nullable=False, index=True)
    access_token = Column(String(255), nullable=False, unique=True)
    created = Column(DateTime, default=datetime.now)

    app = relationship('DBApp', back_populates='connections')


class DBRetiredToken(db.Model):
    """Access tokens of severed connections, which must never be reissued."""

    __tablename__ = 'retired_token'

    token_hash = Column(String(64), primary_key=True)
    """SHA-256 hex digest of the access token."""

    retired = Column(DateTime, default=datetime.now)

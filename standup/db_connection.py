# standup/db_connection.py
import logging
import os
from typing import Callable

from google.cloud import secretmanager
from google.oauth2 import service_account
from google.auth import default as google_auth_default

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session

from standup.entities import Base

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("standup_api")

LOCAL_SQLITE_URL = "sqlite:///standup.db"


class DBConnection:
    def __init__(self) -> None:
        # ---- env config ----
        self.PROJECT_ID   = os.getenv("PROJECT_ID", "")
        self.DB_HOST      = os.getenv("DB_HOST", "localhost")
        self.DB_PORT      = int(os.getenv("DB_PORT", "5432"))
        self.DB_NAME      = os.getenv("DB_NAME", "")
        self.DB_USER      = os.getenv("DB_USER", "")
        self.DB_PASSWORD  = os.getenv("DB_PASSWORD", "")
        self.DB_SECRET_ID = os.getenv("DB_SECRET_ID", "")
        self.DB_TIMEOUT   = int(os.getenv("DB_TIMEOUT", "10"))

        # DATABASE_URL wins; otherwise a remote DB_HOST means Postgres over pg8000
        self.DATABASE_URL = os.getenv("DATABASE_URL", "")
        self.IS_LOCAL = self.DB_HOST == "localhost"
        self._sessionmaker = None

    # -------- GCP auth / creds --------
    def _build_creds(self):
        key_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
        scopes = ["https://www.googleapis.com/auth/cloud-platform"]
        if key_path and os.path.exists(key_path):
            return service_account.Credentials.from_service_account_file(key_path, scopes=scopes)
        creds, _ = google_auth_default(scopes=scopes)
        return creds

    # -------- DB password (Secret Manager) --------
    def _get_db_password_lazy(self) -> str:
        if self.DB_PASSWORD:
            return self.DB_PASSWORD
        if self.DB_SECRET_ID:
            client = secretmanager.SecretManagerServiceClient(credentials=self._build_creds())
            name = client.secret_version_path(self.PROJECT_ID, self.DB_SECRET_ID, "latest")
            resp = client.access_secret_version(request={"name": name})
            self.DB_PASSWORD = resp.payload.data.decode("utf-8")
            return self.DB_PASSWORD
        raise RuntimeError("No DB_PASSWORD and no Secret Manager configured")

    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.IS_LOCAL:
            return LOCAL_SQLITE_URL
        password = self._get_db_password_lazy()
        return f"postgresql+pg8000://{self.DB_USER}:{password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    def get_db_engine(self):
        url = self.database_url()
        logger.info(f"[DB] Connecting to {make_url(url).render_as_string(hide_password=True)}")

        if url.startswith("sqlite"):
            return create_engine(url, future=True)

        # pg8000 supports 'timeout' in seconds
        return create_engine(
            url,
            future=True,
            pool_pre_ping=True,
            connect_args={"timeout": self.DB_TIMEOUT},
        )

    # -------- SQLAlchemy Session factory --------
    def build_db_session_factory(self) -> Callable[[], Session]:
        if self._sessionmaker is None:
            engine = self.get_db_engine()
            Base.metadata.create_all(engine)
            self._sessionmaker = sessionmaker(
                bind=engine,
                autoflush=False,
                autocommit=False,
                future=True,
            )

        def _factory() -> Session:
            return self._sessionmaker()

        return _factory

from pathlib import Path

from sqlalchemy.engine import make_url

from app.core.config import get_settings
from app.db import models  # noqa: F401
from app.db.base import Base
from app.db.session import build_engine


def main() -> None:
    settings = get_settings()
    url = make_url(settings.database_url)
    if url.drivername.startswith("sqlite") and url.database:
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = build_engine(settings.database_url)
    Base.metadata.create_all(engine)
    print(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    main()

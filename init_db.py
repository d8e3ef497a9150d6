import sys
import logging

from anonqa.bootstrap import bootstrap
from anonqa.database import Base, SessionLocal, engine, init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(reset=False):
    if reset:
        # 刪除現有資料表
        from anonqa.models import user, role, department, question, answer, comment, vote  # noqa: F401
        Base.metadata.drop_all(bind=engine)
        print("已刪除現有資料表")

    init_db()
    print("已創建資料表")

    db = SessionLocal()
    try:
        bootstrap(db)
        print("已建立預設部門與管理員")
    finally:
        db.close()


if __name__ == "__main__":
    main(reset="--reset" in sys.argv[1:])

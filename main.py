from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime
import logging

from anonqa.bootstrap import bootstrap
from anonqa.config import settings
from anonqa.database import SessionLocal, init_db
from anonqa.errors import QAError
from anonqa.routers import answers, auth, comments, departments, notifications, questions, users, votes

# 設置日誌
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 創建資料表
    init_db()
    db = SessionLocal()
    try:
        bootstrap(db)
    except Exception as e:
        logger.error(f"初始化資料時出錯: {str(e)}")
    finally:
        db.close()
    logger.info(f"啟動時間: {datetime.now()}")
    yield


app = FastAPI(title="Anonymous Q&A", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(QAError)
async def qa_error_handler(request: Request, exc: QAError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "reason": exc.reason},
        headers=exc.headers,
    )


# 包含路由器
app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(questions.router, prefix="/questions", tags=["Questions"])
app.include_router(answers.router, prefix="/answers", tags=["Answers"])
app.include_router(comments.router, prefix="/comments", tags=["Comments"])
app.include_router(votes.router, prefix="/votes", tags=["Votes"])
app.include_router(departments.router, prefix="/departments", tags=["Departments"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

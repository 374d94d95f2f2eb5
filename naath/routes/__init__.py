from fastapi import APIRouter
from .users import router as users_router
from .articles import router as articles_router
from .comments import router as comments_router
from .artifacts import router as artifacts_router

router = APIRouter()
router.include_router(users_router, prefix='/users', tags=['users'])
router.include_router(articles_router, prefix='/articles', tags=['articles'])
router.include_router(comments_router, prefix='/comments', tags=['comments'])
router.include_router(artifacts_router, prefix='/artifacts', tags=['artifacts'])

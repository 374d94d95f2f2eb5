from fastapi import APIRouter, Depends
from ..schemas.users import (
    RegisterIn,
    LoginIn,
    PasswordChangeIn,
    RoleUpdateIn,
    StatusUpdateIn,
    TokenOut,
    UserOut,
)
from ..schemas.common import MessageOut, ResourceId
from ..crud import (
    create_user,
    authenticate_user,
    change_password,
    update_user_admin_fields,
)
from ..auth import get_current_user, token_for_user
from ..permissions import require_admin
from ..models.users import User

router = APIRouter()


@router.post('/register', response_model=TokenOut, status_code=201)
async def register(payload: RegisterIn):
    user = await create_user(payload)
    return {'access_token': token_for_user(user), 'user': user}


@router.post('/login', response_model=TokenOut)
async def login(payload: LoginIn):
    user = await authenticate_user(payload.username, payload.password)
    return {'access_token': token_for_user(user), 'user': user}


@router.get('/me', response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post('/refresh', response_model=TokenOut)
async def refresh(current_user: User = Depends(get_current_user)):
    return {'access_token': token_for_user(current_user), 'user': current_user}


@router.put('/me/password', response_model=MessageOut)
async def update_password(payload: PasswordChangeIn, current_user: User = Depends(get_current_user)):
    await change_password(current_user.id, payload.current_password, payload.new_password)
    return {'message': 'Password changed successfully'}


@router.put('/{user_id}/role', response_model=UserOut)
async def set_role(user_id: ResourceId, payload: RoleUpdateIn, _admin: User = Depends(require_admin)):
    return await update_user_admin_fields(user_id, role=payload.role.value)


@router.put('/{user_id}/status', response_model=UserOut)
async def set_status(user_id: ResourceId, payload: StatusUpdateIn, _admin: User = Depends(require_admin)):
    return await update_user_admin_fields(user_id, is_active=payload.is_active)

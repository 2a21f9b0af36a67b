from fastapi import APIRouter, Depends, status

from futsal.crud.accounts import admin_crud
from futsal.deps import CurrentAdmin, get_current_admin, super_admin_or_bootstrap
from futsal.schemas import AdminAuthResponse, AdminProfile, AdminRegister, ApiResponse, LoginRequest

router = APIRouter(prefix="/admin/auth", tags=["admin-auth"])


@router.post(
    "/register",
    response_model=ApiResponse[AdminAuthResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(super_admin_or_bootstrap)],
)
async def register_admin(payload: AdminRegister) -> ApiResponse[AdminAuthResponse]:
    result = await admin_crud.register(payload)
    return ApiResponse(message="Admin registered", data=result)


@router.post("/login", response_model=ApiResponse[AdminAuthResponse])
async def login_admin(payload: LoginRequest) -> ApiResponse[AdminAuthResponse]:
    result = await admin_crud.login(payload.email, payload.password)
    return ApiResponse(message="Login successful", data=result)


@router.get("/profile", response_model=ApiResponse[AdminProfile])
async def admin_profile(
    admin: CurrentAdmin = Depends(get_current_admin),
) -> ApiResponse[AdminProfile]:
    return ApiResponse(message="Profile retrieved", data=await admin_crud.profile(admin.id))
